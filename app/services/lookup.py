"""Returning-user shortcut: email → existing user → new session.

Never creates users and never touches invite codes or the redemption ledger.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.access import AccessContext
from app.core.validators import normalize_email
from app.models.base import utcnow
from app.models.tenant import CompanyRead, Tenant
from app.models.user import User
from app.models.user_session import SessionPayload
from app.services import sessions

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No account found with this email. Please use an invite code to join."
NO_COMPANY_MESSAGE = "Your account is not associated with an active company."


class LookupMiss(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


async def lookup_returning_user(
    session: AsyncSession,
    ctx: AccessContext,
    raw_email: object,
    *,
    session_ttl_days: int = 0,
) -> SessionPayload:
    """Re-issue a session for the first active user holding ``raw_email``.

    Email is unique per tenant only, so the earliest-created match in an
    active tenant wins. Raises LookupMiss when there is nothing to log into.
    """
    email = normalize_email(raw_email)
    active_user = (User.email == email, User.is_active.is_(True))  # type: ignore[union-attr]

    result = await session.execute(
        select(User, Tenant)
        .join(Tenant, Tenant.id == User.tenant_id)
        .where(*active_user, Tenant.is_active.is_(True))  # type: ignore[union-attr]
        .order_by(User.created_at.asc(), User.id.asc())  # type: ignore[union-attr]
        .limit(1)
    )
    row = result.first()
    if row is None:
        # Distinguish "no account" from "account only in deactivated companies"
        stranded = await session.execute(select(User.id).where(*active_user).limit(1))
        if stranded.first() is not None:
            logger.info("Lookup for %s matched users in inactive tenants only", email)
            raise LookupMiss(NO_COMPANY_MESSAGE)
        raise LookupMiss(NOT_FOUND_MESSAGE)
    user, tenant = row

    user.last_active_at = utcnow()
    session.add(user)
    payload = await sessions.issue_session(
        session, user, CompanyRead.from_tenant(tenant), ttl_days=session_ttl_days,
    )
    await session.commit()
    logger.info("Returning user %s resumed via lookup (%s)", user.id, type(ctx).__name__)
    return payload
