"""Session endpoints — current identity + logout for a bound session token."""

from fastapi import APIRouter, status

from app.api.deps import Access, Session
from app.models.user_session import SessionInfo
from app.services.sessions import describe_session, revoke_session

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/me", response_model=SessionInfo)
async def get_current_session(access: Access, session: Session) -> SessionInfo:
    """Return the user and company the bearer token is bound to."""
    return await describe_session(session, access)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(access: Access, session: Session) -> None:
    """Revoke the bearer token. Later requests with it get 401."""
    await revoke_session(session, access)
