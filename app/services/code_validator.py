"""Invite code lifecycle checks.

``evaluate_code`` is a pure predicate over one invite row; ``check_code``
adds the lookup and tenant projection around it. Neither writes anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.access import AccessContext
from app.core.validators import normalize_code
from app.models.base import utcnow
from app.models.invite_code import InviteCode
from app.models.tenant import CompanyRead, Tenant

logger = logging.getLogger(__name__)


class CodeStatus(StrEnum):
    VALID = "VALID"
    INVALID = "INVALID"
    EXPIRED = "EXPIRED"
    FULL = "FULL"
    INACTIVE = "INACTIVE"


STATUS_MESSAGES: dict[CodeStatus, str] = {
    CodeStatus.VALID: "This invite code is valid.",
    CodeStatus.INVALID: "This invite code does not exist. Please check for typos.",
    CodeStatus.INACTIVE: "This invite code has been deactivated.",
    CodeStatus.EXPIRED: "This invite code has expired. Please contact your administrator.",
    CodeStatus.FULL: "This invite code has reached its maximum number of uses.",
}


@dataclass
class CodeCheck:
    """Outcome of validating one raw code."""
    status: CodeStatus
    invite: InviteCode | None = None
    tenant: Tenant | None = None

    @property
    def is_valid(self) -> bool:
        return self.status is CodeStatus.VALID

    @property
    def message(self) -> str:
        return STATUS_MESSAGES[self.status]

    @property
    def company(self) -> CompanyRead | None:
        return CompanyRead.from_tenant(self.tenant) if self.tenant is not None else None


def evaluate_code(invite: InviteCode, now: datetime) -> CodeStatus:
    """Lifecycle precedence: inactive, then expired, then full."""
    if not invite.is_active:
        return CodeStatus.INACTIVE
    if invite.expires_at is not None and invite.expires_at < now:
        return CodeStatus.EXPIRED
    if invite.max_uses is not None and invite.current_uses >= invite.max_uses:
        return CodeStatus.FULL
    return CodeStatus.VALID


async def find_code(session: AsyncSession, normalized_code: str) -> InviteCode | None:
    result = await session.execute(
        select(InviteCode).where(InviteCode.code == normalized_code)
    )
    return result.scalar_one_or_none()


async def check_code(
    session: AsyncSession,
    ctx: AccessContext,
    raw_code: object,
    now: datetime | None = None,
) -> CodeCheck:
    """Normalize, look up and evaluate a code.

    Raises ValidationError for a missing/blank code. Every other outcome,
    including unknown codes, is reported through ``CodeCheck.status``.
    """
    code = normalize_code(raw_code)
    now = now or utcnow()

    invite = await find_code(session, code)
    if invite is None:
        return CodeCheck(CodeStatus.INVALID)

    status = evaluate_code(invite, now)
    if status is not CodeStatus.VALID:
        logger.info("Invite code %s rejected as %s (%s)", code, status, type(ctx).__name__)
        return CodeCheck(status, invite=invite)

    tenant = await session.get(Tenant, invite.tenant_id)
    if tenant is None:
        logger.warning("Invite code %s points at missing tenant %s", code, invite.tenant_id)
        return CodeCheck(CodeStatus.INVALID, invite=invite)
    if not tenant.is_active:
        return CodeCheck(CodeStatus.INACTIVE, invite=invite)

    return CodeCheck(CodeStatus.VALID, invite=invite, tenant=tenant)
