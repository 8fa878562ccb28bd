"""Error rendering: storage failures, missing configuration, malformed bodies."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from app.core.config import Settings
from app.main import create_app
from app.models.invite_redemption import InviteRedemption
from app.models.user import User
from app.services import ledger


@pytest.mark.asyncio
async def test_storage_failure_mid_redemption_rolls_everything_back(
    client: AsyncClient, make_tenant, make_code, fetch_code, count_rows, monkeypatch
):
    tenant = await make_tenant(slug="acme")
    await make_code(tenant, code="ACME-7X9K", max_uses=5)

    async def broken_ledger(session, **kwargs):
        raise OperationalError("INSERT INTO invite_redemptions", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ledger, "record_redemption", broken_ledger)

    resp = await client.post(
        "/v1/invite/redeem",
        json={"code": "ACME-7X9K", "name": "Quinn Hale", "email": "quinn@acme.test"},
    )
    assert resp.status_code == 500
    # No driver detail leaks to the client
    assert resp.json() == {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}

    assert await count_rows(User) == 0
    assert await count_rows(InviteRedemption) == 0
    assert (await fetch_code("ACME-7X9K")).current_uses == 0


@pytest.mark.asyncio
async def test_missing_database_url_is_config_error():
    application = create_app(Settings(_env_file=None, database_url=""))
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.post("/v1/invite/validate", json={"code": "ACME-7X9K"})

    assert resp.status_code == 500
    assert resp.json() == {"code": "CONFIG_ERROR", "message": "Server configuration error"}


@pytest.mark.asyncio
async def test_non_json_body_is_validation_error(client: AsyncClient):
    resp = await client.post(
        "/v1/invite/validate",
        content=b"code=ACME",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"
