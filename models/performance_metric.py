from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Column, Field, SQLModel

from utils.clock import utcnow


class PerformanceMetric(SQLModel, table=True):
    """Navigation/paint timing bundle reported by a page view."""

    __tablename__ = "performance_metrics"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Stored exactly as the browser sent it
    metrics: Any = Field(
        default=None, sa_column=Column(JSON().with_variant(JSONB(), "postgresql"))
    )
    url: Optional[str] = Field(default=None)
    user_agent: Optional[str] = Field(default=None)
    timestamp: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False),
    )
