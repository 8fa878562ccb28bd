"""Invite redemption: code → user identity → ledger → session.

    START --validate--> INVALID | EXPIRED | FULL | INACTIVE      (no writes)
    START --VALID--> RESOLVE --existing user--> ISSUE_SESSION
    RESOLVE --new user--> CREATE_USER -> RECORD_REDEMPTION -> INCREMENT -> ISSUE_SESSION

Everything after validation runs in one transaction and is committed once,
so a failure at any step leaves no user, ledger row, counter bump or session
behind.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import AccessContext
from app.core.errors import DomainRejection
from app.core.validators import normalize_code, normalize_email, normalize_name
from app.models.base import utcnow
from app.models.user_session import SessionPayload
from app.services import identity, ledger, sessions
from app.services.code_validator import STATUS_MESSAGES, CodeStatus, check_code

logger = logging.getLogger(__name__)


class InviteRejected(DomainRejection):
    """The code cannot be redeemed; ``status`` says why."""

    code = "INVALID_CODE"

    def __init__(self, status: CodeStatus, message: str | None = None) -> None:
        super().__init__(message or STATUS_MESSAGES[status])
        self.status = status


class AccountDisabled(DomainRejection):
    """The email already belongs to a disabled user in this tenant."""

    code = "EMAIL_EXISTS"

    def __init__(self) -> None:
        super().__init__("An account with this email exists but has been disabled.")


async def redeem_invite(
    session: AsyncSession,
    ctx: AccessContext,
    *,
    code: object,
    name: object,
    email: object,
    session_ttl_days: int = 0,
) -> SessionPayload:
    """Redeem ``code`` for ``email`` and return a freshly issued session.

    Raises ValidationError for bad input, InviteRejected / AccountDisabled
    for business rejections.
    """
    normalized_code = normalize_code(code)
    normalized_name = normalize_name(name)
    normalized_email = normalize_email(email)

    check = await check_code(session, ctx, normalized_code)
    if not check.is_valid:
        raise InviteRejected(check.status)

    # Plain values only from here: the resolver may roll back and expire ORM state.
    invite_id = check.invite.id
    company = check.company
    now = utcnow()

    user, created = await identity.resolve_user(
        session,
        tenant_id=company.id,
        email=normalized_email,
        name=normalized_name,
        invite_code_id=invite_id,
    )
    if not user.is_active:
        await session.rollback()
        raise AccountDisabled()

    if created:
        try:
            await ledger.record_redemption(
                session, invite_code_id=invite_id, user_id=user.id, now=now,
            )
        except ledger.SeatUnavailable:
            await session.rollback()
            recheck = await check_code(session, ctx, normalized_code)
            status = CodeStatus.FULL if recheck.is_valid else recheck.status
            raise InviteRejected(status) from None
    else:
        logger.info("Returning user %s re-entered tenant %s via code %s",
                    user.id, company.id, normalized_code)

    payload = await sessions.issue_session(
        session, user, company, ttl_days=session_ttl_days, now=now,
    )
    await session.commit()
    return payload
