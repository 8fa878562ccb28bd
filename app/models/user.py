"""User model — belongs to exactly one tenant."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid, utcnow


class UserRole(StrEnum):
    ADMIN = "admin"
    USER = "user"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"
    # The same email may exist in several tenants, never twice in one.
    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    email: str = Field(max_length=320, nullable=False, index=True)
    name: str = Field(default="", max_length=255)
    role: UserRole = Field(default=UserRole.USER)
    invited_via: uuid.UUID | None = Field(
        default=None, foreign_key="invite_codes.id", nullable=True, index=True,
    )
    is_active: bool = Field(default=True)
    last_active_at: datetime = Field(default_factory=utcnow, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class UserSummary(SQLModel):
    """The user fields handed to the client in a session."""
    id: uuid.UUID
    name: str
    email: str
