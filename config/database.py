from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from models.contact_message import ContactMessage
from models.lcp_metric import LCPMetric
from models.newsletter_subscriber import NewsletterSubscriber
from models.performance_metric import PerformanceMetric

MAIN_TABLES = [
    PerformanceMetric.__table__,
    LCPMetric.__table__,
    NewsletterSubscriber.__table__,
]
CONTACT_TABLES = [ContactMessage.__table__]


def build_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    return create_engine(database_url, echo=echo, pool_pre_ping=True, **kwargs)


def init_db(engine: Engine, contact_engine: Engine):
    """Create missing tables; the contact store may live in another database."""
    SQLModel.metadata.create_all(engine, tables=MAIN_TABLES)
    SQLModel.metadata.create_all(contact_engine, tables=CONTACT_TABLES)


def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session


def get_contact_session(request: Request):
    with Session(request.app.state.contact_engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]
ContactSessionDep = Annotated[Session, Depends(get_contact_session)]
