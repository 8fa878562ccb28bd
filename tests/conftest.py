"""Shared test fixtures — per-test SQLite database file + app + test client.

A file database (not ``:memory:``) gives every AsyncSession its own
connection, so tests can interleave two units of work the way two
concurrent requests would.
"""

import json
from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func
from sqlmodel import select

from app.core.config import Settings
from app.main import create_app
from app.models.invite_code import InviteCode
from app.models.tenant import Tenant

ADMIN_KEY = "test-admin-key-0123456789"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'invitegate.db'}",
        admin_api_key=ADMIN_KEY,
        session_ttl_days=30,
        auto_create_tables=False,
    )


@pytest.fixture
async def application(settings):
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest.fixture
def session_factory(application):
    return application.state.database.session_factory


@pytest.fixture
async def session(session_factory):
    async with session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
async def client(application) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client talking to the app in-process."""
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {ADMIN_KEY}"}


@pytest.fixture
def make_tenant(session_factory):
    """Factory: insert a tenant (tenants are created by operators, not the API)."""

    async def _make(
        slug: str = "acme",
        name: str | None = None,
        branding: dict | None = None,
        is_active: bool = True,
    ) -> Tenant:
        async with session_factory() as sess:
            tenant = Tenant(
                name=name or f"{slug.title()} Inc",
                slug=slug,
                branding=json.dumps(branding or {}),
                is_active=is_active,
            )
            sess.add(tenant)
            await sess.commit()
            return tenant

    return _make


@pytest.fixture
def make_code(session_factory):
    """Factory: insert an invite code for a tenant."""

    async def _make(
        tenant: Tenant,
        code: str = "ACME-7X9K",
        max_uses: int | None = None,
        current_uses: int = 0,
        expires_at: datetime | None = None,
        is_active: bool = True,
    ) -> InviteCode:
        async with session_factory() as sess:
            invite = InviteCode(
                tenant_id=tenant.id,
                code=code,
                max_uses=max_uses,
                current_uses=current_uses,
                expires_at=expires_at,
                is_active=is_active,
            )
            sess.add(invite)
            await sess.commit()
            return invite

    return _make


@pytest.fixture
def count_rows(session_factory):
    """Count committed rows of a model, optionally filtered."""

    async def _count(model, *where) -> int:
        async with session_factory() as sess:
            stmt = select(func.count()).select_from(model)
            if where:
                stmt = stmt.where(*where)
            return (await sess.execute(stmt)).scalar_one()

    return _count


@pytest.fixture
def fetch_code(session_factory):
    """Re-read an invite code from the database."""

    async def _fetch(code: str) -> InviteCode:
        async with session_factory() as sess:
            result = await sess.execute(select(InviteCode).where(InviteCode.code == code))
            return result.scalar_one()

    return _fetch
