"""Typed access context passed explicitly into every data-access call."""

import uuid
from dataclasses import dataclass

from app.core.errors import AccessDenied, Forbidden


@dataclass(frozen=True, slots=True)
class Anonymous:
    """No credential presented (public invite endpoints)."""


@dataclass(frozen=True, slots=True)
class TenantAccess:
    """A verified session bound to one user inside one tenant."""

    tenant_id: uuid.UUID
    user_id: uuid.UUID
    session_id: uuid.UUID


@dataclass(frozen=True, slots=True)
class AdminAccess:
    """Platform operator holding the admin API key."""


AccessContext = Anonymous | TenantAccess | AdminAccess


def require_admin(ctx: AccessContext) -> AdminAccess:
    if isinstance(ctx, AdminAccess):
        return ctx
    if isinstance(ctx, Anonymous):
        raise AccessDenied("Authentication required")
    raise Forbidden("Admin access required")


def require_tenant(ctx: AccessContext) -> TenantAccess:
    if isinstance(ctx, TenantAccess):
        return ctx
    if isinstance(ctx, Anonymous):
        raise AccessDenied("Authentication required")
    raise Forbidden("A user session is required")
