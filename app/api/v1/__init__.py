"""V1 API router aggregation."""

from fastapi import APIRouter

from app.api.v1.admin_invites import router as admin_invites_router
from app.api.v1.companies import router as companies_router
from app.api.v1.invite import router as invite_router
from app.api.v1.session import router as session_router
from app.api.v1.system import router as system_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(invite_router)
v1_router.include_router(session_router)
v1_router.include_router(companies_router)
v1_router.include_router(admin_invites_router)
v1_router.include_router(system_router)
