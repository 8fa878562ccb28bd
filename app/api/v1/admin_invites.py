"""Invite code administration — admin API key only."""

import uuid

from fastapi import APIRouter, status

from app.api.deps import Access, Session
from app.models.invite_code import InviteCodeCreate, InviteCodeRead, InviteCodeUpdate
from app.services import invite_admin

router = APIRouter(prefix="/admin/companies/{tenant_id}/invites", tags=["admin"])


@router.get("", response_model=list[InviteCodeRead])
async def list_invite_codes(
    tenant_id: uuid.UUID, access: Access, session: Session
) -> list[InviteCodeRead]:
    """All codes of a company, newest first, with who redeemed them."""
    return await invite_admin.list_codes(session, access, tenant_id)


@router.post("", response_model=InviteCodeRead, status_code=status.HTTP_201_CREATED)
async def create_invite_code(
    tenant_id: uuid.UUID,
    body: InviteCodeCreate,
    access: Access,
    session: Session,
) -> InviteCodeRead:
    """Create a code. Omit ``code`` to have one generated from the company slug."""
    return await invite_admin.create_code(session, access, tenant_id, body)


@router.get("/{code}", response_model=InviteCodeRead)
async def get_invite_code(
    tenant_id: uuid.UUID, code: str, access: Access, session: Session
) -> InviteCodeRead:
    return await invite_admin.get_code(session, access, tenant_id, code)


@router.patch("/{code}", response_model=InviteCodeRead)
async def update_invite_code(
    tenant_id: uuid.UUID,
    code: str,
    body: InviteCodeUpdate,
    access: Access,
    session: Session,
) -> InviteCodeRead:
    return await invite_admin.update_code(session, access, tenant_id, code, body)


@router.delete("/{code}")
async def delete_invite_code(
    tenant_id: uuid.UUID, code: str, access: Access, session: Session
) -> dict:
    """Delete an unused code, or deactivate it if it has been redeemed."""
    return await invite_admin.delete_code(session, access, tenant_id, code)
