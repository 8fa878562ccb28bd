"""FastAPI dependencies for settings, DB sessions and access resolution."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import AccessContext, AdminAccess, Anonymous
from app.core.config import Settings, get_settings
from app.core.database import get_session
from app.core.errors import AccessDenied
from app.core.security import constant_time_equals
from app.services.sessions import resolve_session_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_access_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccessContext:
    """Resolve the bearer header to an explicit AccessContext.

    - no header → Anonymous
    - the configured admin API key → AdminAccess
    - anything else must be a live session token → TenantAccess (or 401)
    """
    if credentials is None:
        return Anonymous()

    raw = credentials.credentials
    if settings.admin_api_key and constant_time_equals(raw, settings.admin_api_key):
        return AdminAccess()
    return await resolve_session_token(session, raw)


async def get_public_access_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccessContext:
    """Like get_access_context, but a stale or unknown token reads as Anonymous.

    Public endpoints must keep working for clients still holding a revoked token.
    """
    try:
        return await get_access_context(credentials, session, settings)
    except AccessDenied:
        return Anonymous()


# Typed shorthand for use in route signatures
Access = Annotated[AccessContext, Depends(get_access_context)]
PublicAccess = Annotated[AccessContext, Depends(get_public_access_context)]
Session = Annotated[AsyncSession, Depends(get_session)]
AppSettings = Annotated[Settings, Depends(get_settings)]
