"""Tenant model — top-level isolation boundary (a company)."""

import json
import uuid

from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from app.models.base import TimestampMixin, new_uuid

PUBLIC_BRANDING_KEYS = ("primary_color", "logo_url")


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    is_active: bool = Field(default=True)

    # Branding stored as JSON text, e.g. {"primary_color": "#0F62FE", "logo_url": "https://..."}
    branding: str = Field(default="{}", sa_column=Column(Text, nullable=False, server_default="{}"))


# ── Public projection ────────────────────────────────────────

class Branding(SQLModel):
    primary_color: str | None = None
    logo_url: str | None = None


class CompanyRead(SQLModel):
    """Public-safe view of a tenant returned to clients."""
    id: uuid.UUID
    name: str
    slug: str
    branding: Branding | None = None

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> "CompanyRead":
        return cls(
            id=tenant.id,
            name=tenant.name,
            slug=tenant.slug,
            branding=parse_branding(tenant.branding),
        )


def parse_branding(raw: str | None) -> Branding | None:
    """Keep only the public branding keys; anything unparseable reads as no branding."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    public = {k: data[k] for k in PUBLIC_BRANDING_KEYS if isinstance(data.get(k), str)}
    if not public:
        return None
    return Branding(**public)
