"""Idempotent create-or-fetch of a user inside one tenant."""

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import StorageError
from app.models.base import utcnow
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


async def find_user(session: AsyncSession, tenant_id: uuid.UUID, email: str) -> User | None:
    result = await session.execute(
        select(User).where(User.tenant_id == tenant_id, User.email == email)
    )
    return result.scalar_one_or_none()


def _touch(session: AsyncSession, user: User) -> User:
    user.last_active_at = utcnow()
    session.add(user)
    return user


async def resolve_user(
    session: AsyncSession,
    *,
    tenant_id: uuid.UUID,
    email: str,
    name: str,
    invite_code_id: uuid.UUID | None,
) -> tuple[User, bool]:
    """Return ``(user, created)`` for ``(tenant_id, email)``.

    The UNIQUE (tenant_id, email) constraint decides races: when a concurrent
    request inserts the same user first, our flush fails, the unit of work
    is rolled back and the winning row is returned with ``created=False``.
    Callers must not rely on ORM objects loaded before this call surviving
    that rollback.
    """
    existing = await find_user(session, tenant_id, email)
    if existing is not None:
        return _touch(session, existing), False

    now = utcnow()
    user = User(
        tenant_id=tenant_id,
        email=email,
        name=name,
        role=UserRole.USER,
        invited_via=invite_code_id,
        last_active_at=now,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        existing = await find_user(session, tenant_id, email)
        if existing is None:
            raise StorageError("Failed to create user account") from exc
        logger.info("Concurrent redemption for %s in tenant %s; reusing user %s",
                    email, tenant_id, existing.id)
        return _touch(session, existing), False

    logger.info("Created user %s in tenant %s", user.id, tenant_id)
    return user, True
