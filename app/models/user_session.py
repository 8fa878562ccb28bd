"""UserSession model — server-side binding of an issued session token."""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.models.base import new_uuid, utcnow
from app.models.tenant import CompanyRead
from app.models.user import UserSummary


class UserSession(SQLModel, table=True):
    __tablename__ = "user_sessions"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)

    # SHA-256 hash of the raw token — raw value is returned once to the client
    token_hash: str = Field(nullable=False, unique=True, index=True)
    token_prefix: str = Field(max_length=12, nullable=False)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    last_active_at: datetime = Field(default_factory=utcnow, nullable=False)
    expires_at: datetime | None = Field(default=None)
    revoked_at: datetime | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class SessionInfo(SQLModel):
    user: UserSummary
    company: CompanyRead
    created_at: datetime
    last_active: datetime


class SessionPayload(SessionInfo):
    """Returned exactly once at issue time — includes the raw token."""
    token: str
