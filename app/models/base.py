"""Shared base fields for all models.

Timestamps are naive UTC throughout: SQLite drops tzinfo and comparisons
against expiry columns must not mix aware and naive values.
"""

import uuid
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class TimestampMixin(SQLModel):
    """Created / updated timestamps for mutable tables."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    def touch(self, now: datetime | None = None) -> None:
        self.updated_at = now or utcnow()
