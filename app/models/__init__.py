"""Import all models so SQLModel.metadata picks them up."""

from app.models.invite_code import (
    InviteCode,
    InviteCodeCreate,
    InviteCodeRead,
    InviteCodeUpdate,
    RedemptionRead,
    RedemptionUser,
)
from app.models.invite_redemption import InviteRedemption
from app.models.tenant import Branding, CompanyRead, Tenant
from app.models.user import User, UserRole, UserSummary
from app.models.user_session import SessionInfo, SessionPayload, UserSession

__all__ = [
    "Branding",
    "CompanyRead",
    "InviteCode",
    "InviteCodeCreate",
    "InviteCodeRead",
    "InviteCodeUpdate",
    "InviteRedemption",
    "RedemptionRead",
    "RedemptionUser",
    "SessionInfo",
    "SessionPayload",
    "Tenant",
    "User",
    "UserRole",
    "UserSession",
    "UserSummary",
]
