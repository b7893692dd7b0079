from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Text
from sqlmodel import Column, Field, SQLModel

from utils.clock import utcnow


class ContactMessage(SQLModel, table=True):
    __tablename__ = "contact_messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(max_length=254)
    subject: str = Field(max_length=255)
    message: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
