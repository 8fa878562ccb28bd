"""Session issuing and verification.

A session token is an opaque 256-bit value handed to the client once. Only
its SHA-256 hash is stored, bound to the (user, tenant) it was issued for,
and every session-bound request is checked against that binding.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.access import AccessContext, TenantAccess, require_tenant
from app.core.errors import AccessDenied, NotFound
from app.core.security import generate_session_token, hash_session_token, token_prefix
from app.models.base import utcnow
from app.models.tenant import CompanyRead, Tenant
from app.models.user import User, UserSummary
from app.models.user_session import SessionInfo, SessionPayload, UserSession

logger = logging.getLogger(__name__)


async def issue_session(
    session: AsyncSession,
    user: User,
    company: CompanyRead,
    *,
    ttl_days: int = 0,
    now: datetime | None = None,
) -> SessionPayload:
    """Mint a token for a resolved user and bind it server-side.

    Adds the binding to the caller's unit of work; the caller commits.
    """
    now = now or utcnow()
    raw_token = generate_session_token()
    record = UserSession(
        tenant_id=company.id,
        user_id=user.id,
        token_hash=hash_session_token(raw_token),
        token_prefix=token_prefix(raw_token),
        created_at=now,
        last_active_at=now,
        expires_at=now + timedelta(days=ttl_days) if ttl_days > 0 else None,
    )
    session.add(record)
    await session.flush()
    logger.info("Issued session %s for user %s", record.token_prefix, user.id)

    return SessionPayload(
        user=UserSummary(id=user.id, name=user.name, email=user.email),
        company=company,
        token=raw_token,
        created_at=record.created_at,
        last_active=record.last_active_at,
    )


async def resolve_session_token(
    session: AsyncSession, raw_token: str, now: datetime | None = None
) -> TenantAccess:
    """Verify a bearer token and return the tenant-scoped context it grants."""
    now = now or utcnow()
    result = await session.execute(
        select(UserSession).where(UserSession.token_hash == hash_session_token(raw_token))
    )
    record = result.scalar_one_or_none()

    if record is None or record.revoked_at is not None:
        raise AccessDenied("Invalid or revoked session token")
    if record.expires_at is not None and record.expires_at < now:
        raise AccessDenied("Session has expired")

    user = await session.get(User, record.user_id)
    if user is None or not user.is_active or user.tenant_id != record.tenant_id:
        raise AccessDenied("Session owner account is disabled")

    record.last_active_at = now
    session.add(record)
    await session.commit()

    return TenantAccess(tenant_id=record.tenant_id, user_id=record.user_id, session_id=record.id)


async def describe_session(session: AsyncSession, ctx: AccessContext) -> SessionInfo:
    tenant_ctx = require_tenant(ctx)
    record = await session.get(UserSession, tenant_ctx.session_id)
    user = await session.get(User, tenant_ctx.user_id)
    tenant = await session.get(Tenant, tenant_ctx.tenant_id)
    if record is None or user is None or tenant is None:
        raise NotFound("Session not found")

    return SessionInfo(
        user=UserSummary(id=user.id, name=user.name, email=user.email),
        company=CompanyRead.from_tenant(tenant),
        created_at=record.created_at,
        last_active=record.last_active_at,
    )


async def revoke_session(session: AsyncSession, ctx: AccessContext) -> None:
    """Logout: the token stops authenticating immediately."""
    tenant_ctx = require_tenant(ctx)
    record = await session.get(UserSession, tenant_ctx.session_id)
    if record is None:
        raise NotFound("Session not found")
    if record.revoked_at is None:
        record.revoked_at = utcnow()
        session.add(record)
        await session.commit()
        logger.info("Revoked session %s for user %s", record.token_prefix, record.user_id)
