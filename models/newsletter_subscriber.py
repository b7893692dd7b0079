import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Column, Field, SQLModel

from utils.clock import utcnow


def default_preferences() -> dict:
    return {"frequency": "weekly", "categories": []}


class NewsletterSubscriber(SQLModel, table=True):
    __tablename__ = "newsletter_subscribers"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(index=True, unique=True, max_length=254)
    name: str = Field(default="")
    is_subscribed: bool = Field(default=True)

    unsubscribe_token: Optional[str] = Field(default=None, index=True)
    preferences_token: Optional[str] = Field(default=None, index=True)
    unsubscribe_token_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    preferences_token_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )

    preferences: dict = Field(
        default_factory=default_preferences,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql")),
    )
    subscription_count: int = Field(default=1)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    last_updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
