import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, Type

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel

from utils.errors import UnknownTableError

logger = logging.getLogger(__name__)

InsertResult = Tuple[bool, Optional[Exception]]


class PersistenceSink(Protocol):
    """Append-only row writer. Never raises; failures come back as (False, error)."""

    def insert(self, table: str, record: Mapping[str, Any]) -> InsertResult: ...


class SQLModelSink:
    """Writes one row per call, each in its own session and transaction.

    The engine is shared across requests; the database serializes the
    inserts, so nothing here needs a lock.
    """

    def __init__(self, engine: Engine, models: Dict[str, Type[SQLModel]]):
        self._engine = engine
        self._models = dict(models)

    @classmethod
    def for_models(cls, engine: Engine, *models: Type[SQLModel]) -> "SQLModelSink":
        return cls(engine, {model.__tablename__: model for model in models})

    def insert(self, table: str, record: Mapping[str, Any]) -> InsertResult:
        model = self._models.get(table)
        if model is None:
            error = UnknownTableError(table)
            logger.error(str(error))
            return False, error

        try:
            with Session(self._engine) as session:
                session.add(model(**record))
                session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.error(f"Error inserting into {table}: {e}")
            return False, e

        return True, None


def get_sink(request: Request) -> PersistenceSink:
    return request.app.state.sink
