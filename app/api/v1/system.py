"""System health endpoint — datastore reachability for load balancers and ops."""

import logging
import time

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


class ServiceHealth(BaseModel):
    status: str  # "ok" or "error"
    dialect: str | None = None
    server_version: str | None = None
    latency_ms: int | None = None
    detail: str | None = None


class HealthResponse(BaseModel):
    status: str
    database: ServiceHealth


@router.get("/health", response_model=HealthResponse)
async def system_health(session: Session) -> HealthResponse:
    """Round-trip a trivial query; report ``degraded`` if it fails."""
    db = await _probe_database(session)
    return HealthResponse(status="ok" if db.status == "ok" else "degraded", database=db)


async def _probe_database(session: AsyncSession) -> ServiceHealth:
    t0 = time.monotonic()
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database health probe failed: %s", exc)
        return ServiceHealth(status="error", detail=str(exc)[:200])

    dialect = session.get_bind().dialect
    version = dialect.server_version_info
    return ServiceHealth(
        status="ok",
        dialect=dialect.name,
        server_version=".".join(str(p) for p in version) if version else None,
        latency_ms=int((time.monotonic() - t0) * 1000),
    )
