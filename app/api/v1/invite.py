"""Public invite endpoints — validate, redeem, returning-user lookup.

Business rejections (unknown, expired, full, inactive codes) are 200
responses with ``valid: false`` / ``success: false``; only malformed input
gets a 400.
"""

from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.api.deps import AppSettings, PublicAccess, Session
from app.core.errors import ValidationError
from app.models.tenant import CompanyRead
from app.models.user import UserSummary
from app.services.code_validator import CodeStatus, check_code
from app.services.lookup import LookupMiss, lookup_returning_user
from app.services.redemption import AccountDisabled, InviteRejected, redeem_invite

router = APIRouter(prefix="/invite", tags=["invite"])

RejectionCode = Literal["INVALID", "EXPIRED", "FULL", "INACTIVE"]


# ── Schemas ──────────────────────────────────────────────────

class ValidateRequest(BaseModel):
    code: str | None = None


class ValidateSuccess(BaseModel):
    valid: Literal[True] = True
    company: CompanyRead


class ValidateFailure(BaseModel):
    valid: Literal[False] = False
    error: RejectionCode
    message: str


class RedeemRequest(BaseModel):
    # Any JSON value; the normalizers reject non-strings
    code: object | None = None
    name: object | None = None
    email: object | None = None


class RedeemSuccess(BaseModel):
    success: Literal[True] = True
    user: UserSummary
    company: CompanyRead
    session_token: str


class RedeemFailure(BaseModel):
    success: Literal[False] = False
    error: Literal["INVALID_CODE", "EMAIL_EXISTS", "VALIDATION_ERROR"]
    reason: RejectionCode | None = None
    message: str


class LookupRequest(BaseModel):
    email: str | None = None


class LookupSuccess(BaseModel):
    found: Literal[True] = True
    user: UserSummary
    company: CompanyRead
    session_token: str


class LookupFailure(BaseModel):
    found: Literal[False] = False
    message: str


# ── Routes ───────────────────────────────────────────────────

@router.post("/validate", response_model=ValidateSuccess | ValidateFailure)
async def validate_invite(
    body: ValidateRequest, access: PublicAccess, session: Session
) -> ValidateSuccess | ValidateFailure:
    """Check a code without consuming it."""
    check = await check_code(session, access, body.code)
    if check.status is CodeStatus.VALID:
        return ValidateSuccess(company=check.company)
    return ValidateFailure(error=check.status.value, message=check.message)


def _redeem_validation_failure(message: str) -> JSONResponse:
    failure = RedeemFailure(error="VALIDATION_ERROR", message=message)
    return JSONResponse(failure.model_dump(mode="json"), status_code=status.HTTP_400_BAD_REQUEST)


@router.post(
    "/redeem",
    response_model=RedeemSuccess | RedeemFailure,
    responses={400: {"model": RedeemFailure}},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": RedeemRequest.model_json_schema()}},
        },
    },
)
async def redeem(
    request: Request, access: PublicAccess, session: Session, settings: AppSettings
) -> RedeemSuccess | RedeemFailure | JSONResponse:
    """Exchange a code for a tenant user and a session token.

    The body is parsed here rather than by FastAPI so that undecodable or
    non-object bodies get the same ``success: false`` shape as bad fields.
    """
    try:
        body = RedeemRequest.model_validate(await request.json())
    except ValueError:
        # JSONDecodeError, UnicodeDecodeError and pydantic's ValidationError
        return _redeem_validation_failure("Request body must be a JSON object")

    try:
        payload = await redeem_invite(
            session,
            access,
            code=body.code,
            name=body.name,
            email=body.email,
            session_ttl_days=settings.session_ttl_days,
        )
    except ValidationError as exc:
        return _redeem_validation_failure(exc.message)
    except InviteRejected as exc:
        return RedeemFailure(error="INVALID_CODE", reason=exc.status.value, message=exc.message)
    except AccountDisabled as exc:
        return RedeemFailure(error="EMAIL_EXISTS", message=exc.message)

    return RedeemSuccess(
        user=payload.user,
        company=payload.company,
        session_token=payload.token,
    )


@router.post("/lookup", response_model=LookupSuccess | LookupFailure)
async def lookup(
    body: LookupRequest, access: PublicAccess, session: Session, settings: AppSettings
) -> LookupSuccess | LookupFailure:
    """Returning users: resume by email alone. Never creates accounts."""
    try:
        payload = await lookup_returning_user(
            session, access, body.email, session_ttl_days=settings.session_ttl_days,
        )
    except LookupMiss as exc:
        return LookupFailure(message=exc.message)

    return LookupSuccess(
        user=payload.user,
        company=payload.company,
        session_token=payload.token,
    )
