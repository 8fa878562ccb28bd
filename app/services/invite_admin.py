"""Admin management of a tenant's invite codes."""

import logging
import uuid
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.access import AccessContext, require_admin
from app.core.errors import Conflict, NotFound, StorageError, ValidationError
from app.core.security import generate_invite_code
from app.core.validators import normalize_custom_code
from app.models.base import utcnow
from app.models.invite_code import (
    InviteCode,
    InviteCodeCreate,
    InviteCodeRead,
    InviteCodeUpdate,
    RedemptionRead,
    RedemptionUser,
)
from app.models.invite_redemption import InviteRedemption
from app.models.tenant import Tenant
from app.models.user import User

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS = 10


async def _get_tenant_or_404(session: AsyncSession, tenant_id: uuid.UUID) -> Tenant:
    tenant = await session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFound("Company not found")
    return tenant


async def _get_code_or_404(
    session: AsyncSession, tenant_id: uuid.UUID, code: str
) -> InviteCode:
    result = await session.execute(
        select(InviteCode).where(
            InviteCode.tenant_id == tenant_id,
            InviteCode.code == code.strip().upper(),
        )
    )
    invite = result.scalar_one_or_none()
    if invite is None:
        raise NotFound("Invite code not found")
    return invite


async def _redemptions_for(
    session: AsyncSession, invite_ids: list[uuid.UUID]
) -> dict[uuid.UUID, list[RedemptionRead]]:
    if not invite_ids:
        return {}
    stmt = (
        select(InviteRedemption, User)
        .join(User, User.id == InviteRedemption.user_id, isouter=True)
        .where(InviteRedemption.invite_code_id.in_(invite_ids))  # type: ignore[attr-defined]
        .order_by(InviteRedemption.created_at.asc())  # type: ignore[attr-defined]
    )
    grouped: dict[uuid.UUID, list[RedemptionRead]] = {i: [] for i in invite_ids}
    for redemption, user in (await session.execute(stmt)).all():
        grouped[redemption.invite_code_id].append(RedemptionRead(
            id=redemption.id,
            redeemed_at=redemption.created_at,
            user=RedemptionUser(id=user.id, name=user.name, email=user.email) if user else None,
        ))
    return grouped


def _to_read(invite: InviteCode, redemptions: list[RedemptionRead]) -> InviteCodeRead:
    return InviteCodeRead(
        **invite.model_dump(),
        redemptions=redemptions,
    )


async def list_codes(
    session: AsyncSession, ctx: AccessContext, tenant_id: uuid.UUID
) -> list[InviteCodeRead]:
    require_admin(ctx)
    await _get_tenant_or_404(session, tenant_id)

    stmt = (
        select(InviteCode)
        .where(InviteCode.tenant_id == tenant_id)
        .order_by(InviteCode.created_at.desc())  # type: ignore[union-attr]
    )
    invites = (await session.execute(stmt)).scalars().all()
    redemptions = await _redemptions_for(session, [i.id for i in invites])
    return [_to_read(i, redemptions[i.id]) for i in invites]


async def get_code(
    session: AsyncSession, ctx: AccessContext, tenant_id: uuid.UUID, code: str
) -> InviteCodeRead:
    require_admin(ctx)
    invite = await _get_code_or_404(session, tenant_id, code)
    redemptions = await _redemptions_for(session, [invite.id])
    return _to_read(invite, redemptions[invite.id])


async def create_code(
    session: AsyncSession,
    ctx: AccessContext,
    tenant_id: uuid.UUID,
    body: InviteCodeCreate,
) -> InviteCodeRead:
    """Create a custom or generated code.

    Uniqueness is left to the UNIQUE index on ``code``: a generated code that
    collides is simply regenerated.
    """
    require_admin(ctx)
    tenant = await _get_tenant_or_404(session, tenant_id)
    slug = tenant.slug

    expires_at = None
    if body.expires_in_days:
        expires_at = utcnow() + timedelta(days=body.expires_in_days)
    notes = body.notes.strip() if body.notes and body.notes.strip() else None

    custom = normalize_custom_code(body.code) if body.code else None
    attempts = 1 if custom else MAX_GENERATION_ATTEMPTS

    for _ in range(attempts):
        invite = InviteCode(
            tenant_id=tenant_id,
            code=custom or generate_invite_code(slug),
            max_uses=body.max_uses,
            expires_at=expires_at,
            notes=notes,
        )
        session.add(invite)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            if custom:
                raise Conflict("This code already exists") from None
            continue
        logger.info("Created invite code %s for tenant %s", invite.code, tenant_id)
        return _to_read(invite, [])

    raise StorageError("Failed to generate unique code")


async def update_code(
    session: AsyncSession,
    ctx: AccessContext,
    tenant_id: uuid.UUID,
    code: str,
    body: InviteCodeUpdate,
) -> InviteCodeRead:
    require_admin(ctx)
    invite = await _get_code_or_404(session, tenant_id, code)

    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("is_active", False) is None:
        del update_data["is_active"]
    new_max = update_data.get("max_uses", invite.max_uses)
    if new_max is not None and new_max < invite.current_uses:
        raise ValidationError(
            f"max_uses cannot be lower than current uses ({invite.current_uses})"
        )
    for field, value in update_data.items():
        setattr(invite, field, value)

    invite.touch()
    session.add(invite)
    await session.commit()
    await session.refresh(invite)

    redemptions = await _redemptions_for(session, [invite.id])
    return _to_read(invite, redemptions[invite.id])


async def delete_code(
    session: AsyncSession, ctx: AccessContext, tenant_id: uuid.UUID, code: str
) -> dict:
    """Hard-delete unused codes; deactivate used ones so the ledger stays intact."""
    require_admin(ctx)
    invite = await _get_code_or_404(session, tenant_id, code)

    if invite.current_uses > 0:
        invite.is_active = False
        invite.touch()
        session.add(invite)
        await session.commit()
        return {
            "success": True,
            "deleted": False,
            "deactivated": True,
            "message": "Code has been used and was deactivated instead of deleted",
        }

    deleted_code = invite.code
    await session.delete(invite)
    await session.commit()
    logger.info("Deleted unused invite code %s for tenant %s", deleted_code, tenant_id)
    return {"success": True, "deleted": True, "code": deleted_code}
