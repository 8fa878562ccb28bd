"""Redemption ledger — one row per consumed seat plus the atomic counter bump."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DomainRejection
from app.models.base import utcnow
from app.models.invite_code import InviteCode
from app.models.invite_redemption import InviteRedemption

logger = logging.getLogger(__name__)


class SeatUnavailable(DomainRejection):
    """The conditional increment matched no row: the code filled up,
    expired or was deactivated after it was validated."""

    code = "FULL"

    def __init__(self, message: str = "This invite code has reached its maximum number of uses.") -> None:
        super().__init__(message)


async def claim_seat(session: AsyncSession, invite_code_id: uuid.UUID, now: datetime) -> None:
    """Increment ``current_uses`` by one iff the code is still usable.

    The capacity test lives in the WHERE clause so the datastore serializes
    concurrent claims on the same row; there is no read-modify-write.
    """
    stmt = (
        update(InviteCode)
        .where(
            InviteCode.id == invite_code_id,
            InviteCode.is_active.is_(True),  # type: ignore[union-attr]
            or_(
                InviteCode.max_uses.is_(None),  # type: ignore[union-attr]
                InviteCode.current_uses < InviteCode.max_uses,  # type: ignore[operator]
            ),
            or_(
                InviteCode.expires_at.is_(None),  # type: ignore[union-attr]
                InviteCode.expires_at >= now,  # type: ignore[operator]
            ),
        )
        .values(current_uses=InviteCode.current_uses + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    if result.rowcount != 1:
        logger.info("Seat claim lost on invite code %s", invite_code_id)
        raise SeatUnavailable()


async def record_redemption(
    session: AsyncSession,
    *,
    invite_code_id: uuid.UUID,
    user_id: uuid.UUID,
    now: datetime | None = None,
) -> InviteRedemption:
    """Insert the redemption fact, then claim the seat.

    Both statements run in the caller's transaction; on SeatUnavailable the
    caller must roll back so neither survives.
    """
    now = now or utcnow()
    redemption = InviteRedemption(invite_code_id=invite_code_id, user_id=user_id, created_at=now)
    session.add(redemption)
    await session.flush()

    await claim_seat(session, invite_code_id, now)
    logger.info("Recorded redemption of invite code %s by user %s", invite_code_id, user_id)
    return redemption
