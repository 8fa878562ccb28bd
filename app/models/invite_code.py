"""InviteCode model — shared secret that lets employees join a tenant."""

import uuid
from datetime import datetime, timezone

from pydantic import field_validator
from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid


class InviteCode(TimestampMixin, SQLModel, table=True):
    __tablename__ = "invite_codes"
    __table_args__ = (
        CheckConstraint("current_uses >= 0", name="ck_invite_codes_uses_non_negative"),
        CheckConstraint("max_uses IS NULL OR max_uses >= 1", name="ck_invite_codes_max_uses_positive"),
        CheckConstraint(
            "max_uses IS NULL OR current_uses <= max_uses",
            name="ck_invite_codes_within_capacity",
        ),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)

    # Always stored uppercase; lookups normalize first
    code: str = Field(max_length=50, unique=True, nullable=False, index=True)

    max_uses: int | None = Field(default=None)
    current_uses: int = Field(default=0, nullable=False)
    expires_at: datetime | None = Field(default=None)
    is_active: bool = Field(default=True)
    notes: str | None = Field(default=None, max_length=1000)


# ── Pydantic schemas ─────────────────────────────────────────

class InviteCodeCreate(SQLModel):
    code: str | None = Field(default=None, max_length=50)
    max_uses: int | None = Field(default=None, ge=1)
    expires_in_days: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=1000)


class InviteCodeUpdate(SQLModel):
    max_uses: int | None = Field(default=None, ge=1)
    expires_at: datetime | None = None
    notes: str | None = Field(default=None, max_length=1000)
    is_active: bool | None = None

    @field_validator("expires_at")
    @classmethod
    def _store_as_naive_utc(cls, value: datetime | None) -> datetime | None:
        # Columns hold naive UTC (see app.models.base.utcnow)
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class RedemptionUser(SQLModel):
    id: uuid.UUID
    name: str
    email: str


class RedemptionRead(SQLModel):
    id: uuid.UUID
    redeemed_at: datetime
    user: RedemptionUser | None = None


class InviteCodeRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    code: str
    max_uses: int | None
    current_uses: int
    expires_at: datetime | None
    is_active: bool
    notes: str | None
    created_at: datetime
    updated_at: datetime
    redemptions: list[RedemptionRead] = []
