"""Public company info by slug (branding for the join page)."""

from fastapi import APIRouter
from sqlmodel import select

from app.api.deps import Session
from app.core.errors import NotFound
from app.models.tenant import CompanyRead, Tenant

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("/by-slug/{slug}", response_model=CompanyRead)
async def get_company_by_slug(slug: str, session: Session) -> CompanyRead:
    result = await session.execute(select(Tenant).where(Tenant.slug == slug))
    tenant = result.scalar_one_or_none()
    # Inactive companies are indistinguishable from missing ones
    if tenant is None or not tenant.is_active:
        raise NotFound("Company not found")
    return CompanyRead.from_tenant(tenant)
