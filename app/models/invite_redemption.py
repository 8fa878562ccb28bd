"""InviteRedemption model — append-only record of a consumed seat."""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.models.base import new_uuid, utcnow


class InviteRedemption(SQLModel, table=True):
    __tablename__ = "invite_redemptions"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    invite_code_id: uuid.UUID = Field(foreign_key="invite_codes.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)

    # Insert-only: no updated_at
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
