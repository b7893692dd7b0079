from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Column, Field, SQLModel

from utils.clock import utcnow


class LCPMetric(SQLModel, table=True):
    """Largest Contentful Paint sample, in milliseconds."""

    __tablename__ = "lcp_metrics"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    value: Optional[float] = Field(default=None)
    url: Optional[str] = Field(default=None)
    user_agent: Optional[str] = Field(default=None)
    timestamp: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), index=True, nullable=False),
    )
