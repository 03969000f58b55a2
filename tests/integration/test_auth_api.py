"""Login, the authentication guard and its failure modes over HTTP."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from rbac_portal.app.core.tokens import TokenService, utcnow
from rbac_portal.app.main import app
from rbac_portal.app.middleware.auth import get_clock

PASSWORD = "Passw0rd!"


@pytest.fixture
async def staff(seeded, make_user):
    return await make_user("staff", seeded.roles["User"], seeded.enterprise, password=PASSWORD)


@pytest.mark.asyncio
async def test_login_returns_token_and_principal(client: AsyncClient, staff):
    resp = await client.post("/api/auth/login", json={"email": "Staff@Example.com", "password": PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["token"]
    assert body["user"]["id"] == staff.id
    assert body["user"]["role"]["name"] == "User"
    assert body["user"]["enterprise"]["name"] == "Default Enterprise"
    assert "password_hash" not in body["user"]


@pytest.mark.asyncio
async def test_unknown_email_and_wrong_password_look_the_same(client: AsyncClient, staff):
    unknown = await client.post("/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    wrong = await client.post("/api/auth/login", json={"email": staff.email, "password": "Wr0ng!pass"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"detail": "Invalid credentials", "code": "invalid_credentials"}


@pytest.mark.asyncio
async def test_five_failures_then_locked(client: AsyncClient, staff, settings):
    for attempt in range(settings.max_login_attempts):
        resp = await client.post("/api/auth/login", json={"email": staff.email, "password": "Wr0ng!pass"})
        assert resp.status_code == 401, f"attempt {attempt + 1}"

    resp = await client.post("/api/auth/login", json={"email": staff.email, "password": PASSWORD})
    assert resp.status_code == 423
    assert resp.json()["code"] == "account_locked"


@pytest.mark.asyncio
async def test_inactive_account(client: AsyncClient, seeded, make_user):
    user = await make_user("dormant", seeded.roles["User"], seeded.enterprise, status="inactive")

    resp = await client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert resp.status_code == 403
    assert resp.json() == {"detail": "Account is inactive", "code": "account_inactive"}

    # A wrong password still reads as bad credentials
    resp = await client.post("/api/auth/login", json={"email": user.email, "password": "Wr0ng!pass"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_suspended_account_cannot_log_in(client: AsyncClient, seeded, make_user):
    user = await make_user("suspended", seeded.roles["User"], seeded.enterprise, status="locked")
    resp = await client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert resp.status_code == 423


@pytest.mark.asyncio
async def test_me_returns_current_principal(client: AsyncClient, staff, login_as):
    headers = await login_as(staff.email)
    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == "staff"
    assert body["role"]["permissions"] == [
        {"module": "dashboard", "can_create": False, "can_read": True, "can_update": False, "can_delete": False}
    ]
    assert resp.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient, seeded):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Access token required", "code": "unauthenticated"}
    assert resp.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_garbage_token(client: AsyncClient, seeded):
    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient, staff, settings):
    issued_long_ago = TokenService(
        settings, clock=lambda: utcnow() - timedelta(minutes=settings.access_token_expire_minutes + 1)
    )
    token = issued_long_ago.issue(staff.id)
    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


@pytest.mark.asyncio
async def test_token_for_deleted_principal(client: AsyncClient, settings, seeded):
    token = TokenService(settings).issue("no-such-user")
    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_issued_token_stops_working_once_suspended(client: AsyncClient, db_session, staff, login_as):
    headers = await login_as(staff.email)
    staff.status = "locked"
    await db_session.commit()

    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 423


@pytest.mark.asyncio
async def test_issued_token_blocked_during_automatic_lock(client: AsyncClient, db_session, staff, login_as):
    headers = await login_as(staff.email)
    staff.locked_until = utcnow() + timedelta(minutes=10)
    await db_session.commit()

    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 423


@pytest.mark.asyncio
async def test_guard_reads_time_from_the_injected_clock(
    client: AsyncClient, db_session, staff, login_as, clock, settings
):
    headers = await login_as(staff.email)
    staff.locked_until = utcnow() + timedelta(minutes=10)
    await db_session.commit()
    app.dependency_overrides[get_clock] = lambda: clock

    clock.now = utcnow()
    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 423

    clock.now = utcnow() + timedelta(minutes=11)
    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200

    clock.now = utcnow() + timedelta(minutes=settings.access_token_expire_minutes + 1)
    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


@pytest.mark.asyncio
async def test_issued_token_rejected_once_deactivated(client: AsyncClient, db_session, staff, login_as):
    headers = await login_as(staff.email)
    staff.status = "inactive"
    await db_session.commit()

    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 403
