"""Tests for POST /v1/invite/redeem."""

import re
import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from app.models.base import utcnow
from app.models.invite_redemption import InviteRedemption
from app.models.user import User, UserRole


async def _redeem(client: AsyncClient, code: str, email: str, name: str = "Jordan Doe"):
    return await client.post(
        "/v1/invite/redeem", json={"code": code, "name": name, "email": email},
    )


@pytest.mark.asyncio
async def test_redeem_creates_user_and_session(
    client: AsyncClient, make_tenant, make_code, fetch_code, session_factory
):
    tenant = await make_tenant(slug="acme", branding={"logo_url": "https://cdn.acme.test/l.png"})
    invite = await make_code(tenant, code="ACME-7X9K", max_uses=5)

    resp = await _redeem(client, "acme-7x9k", " Jordan.Doe@Acme.test ", name="  Jordan Doe ")
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    assert data["user"]["email"] == "jordan.doe@acme.test"
    assert data["user"]["name"] == "Jordan Doe"
    assert data["company"]["slug"] == "acme"
    assert data["company"]["branding"] == {"primary_color": None, "logo_url": "https://cdn.acme.test/l.png"}
    assert re.fullmatch(r"[0-9a-f]{64}", data["session_token"])

    async with session_factory() as sess:
        user = (await sess.execute(select(User))).scalar_one()
        assert str(user.id) == data["user"]["id"]
        assert user.tenant_id == tenant.id
        assert user.role == UserRole.USER
        assert user.invited_via == invite.id
        redemption = (await sess.execute(select(InviteRedemption))).scalar_one()
        assert redemption.user_id == user.id
        assert redemption.invite_code_id == invite.id

    assert (await fetch_code("ACME-7X9K")).current_uses == 1


@pytest.mark.asyncio
async def test_redeem_twice_same_email_is_idempotent(
    client: AsyncClient, make_tenant, make_code, fetch_code, count_rows
):
    tenant = await make_tenant(slug="acme")
    await make_code(tenant, code="ACME-7X9K", max_uses=5)

    first = (await _redeem(client, "ACME-7X9K", "sam@acme.test")).json()
    second = (await _redeem(client, "ACME-7X9K", "SAM@acme.test", name="Another Name")).json()

    assert first["success"] is True and second["success"] is True
    assert first["user"]["id"] == second["user"]["id"]
    # The stored name is kept for returning users
    assert second["user"]["name"] == "Jordan Doe"
    assert first["session_token"] != second["session_token"]

    assert await count_rows(InviteRedemption) == 1
    assert await count_rows(User) == 1
    assert (await fetch_code("ACME-7X9K")).current_uses == 1


@pytest.mark.asyncio
async def test_redeem_short_name_is_validation_error(
    client: AsyncClient, make_tenant, make_code, count_rows
):
    tenant = await make_tenant(slug="acme")
    await make_code(tenant, code="ACME-7X9K")

    resp = await _redeem(client, "ACME-7X9K", "a@x.com", name=" J ")
    assert resp.status_code == 400
    data = resp.json()
    assert data["success"] is False
    assert data["error"] == "VALIDATION_ERROR"
    assert await count_rows(User) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"code": "ACME-7X9K", "name": "Jordan", "email": "not-an-email"},
    {"code": "ACME-7X9K", "name": "Jordan"},
    {"name": "Jordan", "email": "a@x.com"},
    {"code": "", "name": "Jordan", "email": "a@x.com"},
    {"code": 12345, "name": "Jordan", "email": "a@x.com"},
    {"code": "ACME-7X9K", "name": ["Jordan"], "email": "a@x.com"},
    {"code": "ACME-7X9K", "name": "Jordan", "email": {"address": "a@x.com"}},
    ["ACME-7X9K", "Jordan", "a@x.com"],
])
async def test_redeem_rejects_malformed_input(client: AsyncClient, payload):
    resp = await client.post("/v1/invite/redeem", json=payload)
    assert resp.status_code == 400
    data = resp.json()
    assert data["success"] is False
    assert data["error"] == "VALIDATION_ERROR"
    assert data["message"]


@pytest.mark.asyncio
async def test_redeem_undecodable_body_keeps_redeem_shape(client: AsyncClient):
    resp = await client.post(
        "/v1/invite/redeem",
        content=b"code=ACME-7X9K&name=Jordan",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "error": "VALIDATION_ERROR",
        "reason": None,
        "message": "Request body must be a JSON object",
    }


@pytest.mark.asyncio
async def test_same_email_in_two_tenants_gets_two_users(
    client: AsyncClient, make_tenant, make_code, count_rows
):
    acme = await make_tenant(slug="acme")
    globex = await make_tenant(slug="globex")
    await make_code(acme, code="ACME-7X9K")
    await make_code(globex, code="GLOB-4Q2M")

    a = (await _redeem(client, "ACME-7X9K", "pat@mail.test")).json()
    g = (await _redeem(client, "GLOB-4Q2M", "pat@mail.test")).json()

    assert a["success"] is True and g["success"] is True
    assert a["user"]["id"] != g["user"]["id"]
    assert a["company"]["id"] == str(acme.id)
    assert g["company"]["id"] == str(globex.id)
    assert await count_rows(User, User.email == "pat@mail.test") == 2


@pytest.mark.asyncio
async def test_last_seat_admits_one_user(
    client: AsyncClient, make_tenant, make_code, fetch_code, count_rows
):
    tenant = await make_tenant(slug="acme")
    await make_code(tenant, code="ONE-SEAT", max_uses=1)

    ok = (await _redeem(client, "ONE-SEAT", "first@acme.test")).json()
    rejected = await _redeem(client, "ONE-SEAT", "second@acme.test")

    assert ok["success"] is True
    assert rejected.status_code == 200
    body = rejected.json()
    assert body["success"] is False
    assert body["error"] == "INVALID_CODE"
    assert body["reason"] == "FULL"
    assert (await fetch_code("ONE-SEAT")).current_uses == 1
    assert await count_rows(User) == 1


@pytest.mark.asyncio
async def test_redeem_rejections_carry_reason(client: AsyncClient, make_tenant, make_code):
    tenant = await make_tenant(slug="acme")
    await make_code(tenant, code="OLD-CODE", expires_at=utcnow() - timedelta(hours=1))
    await make_code(tenant, code="OFF-CODE", is_active=False)

    expired = (await _redeem(client, "OLD-CODE", "a@acme.test")).json()
    inactive = (await _redeem(client, "OFF-CODE", "a@acme.test")).json()
    unknown = (await _redeem(client, "NOT-REAL", "a@acme.test")).json()

    assert (expired["error"], expired["reason"]) == ("INVALID_CODE", "EXPIRED")
    assert (inactive["error"], inactive["reason"]) == ("INVALID_CODE", "INACTIVE")
    assert (unknown["error"], unknown["reason"]) == ("INVALID_CODE", "INVALID")


@pytest.mark.asyncio
async def test_disabled_user_cannot_redeem_again(
    client: AsyncClient, make_tenant, make_code, session_factory, count_rows
):
    tenant = await make_tenant(slug="acme")
    await make_code(tenant, code="ACME-7X9K")
    first = (await _redeem(client, "ACME-7X9K", "gone@acme.test")).json()

    async with session_factory() as sess:
        user = await sess.get(User, uuid.UUID(first["user"]["id"]))
        user.is_active = False
        sess.add(user)
        await sess.commit()

    resp = await _redeem(client, "ACME-7X9K", "gone@acme.test")
    assert resp.status_code == 200
    assert resp.json()["error"] == "EMAIL_EXISTS"
    assert await count_rows(InviteRedemption) == 1
