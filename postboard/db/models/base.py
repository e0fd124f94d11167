"""Shared columns for every dashboard table."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class UUIDModel(SQLModel):
    """Random UUID primary key, so ids handed to clients reveal no row counts."""

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True, nullable=False)


class TimestampMixin(SQLModel):
    """Naive-UTC ``created_at`` plus an ``updated_at`` refreshed by the ORM on update."""

    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column_kwargs={"onupdate": datetime.utcnow},
    )
