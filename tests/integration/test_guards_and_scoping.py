"""Permission guards and tenant confinement on the resource endpoints."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from rbac_portal.app.core.exceptions import Forbidden
from rbac_portal.app.core.tokens import utcnow
from rbac_portal.app.main import app
from rbac_portal.app.middleware.auth import get_clock, require_role
from rbac_portal.app.services.auth_service import get_user_by_id

EMPLOYEE = {"name": "Ada Lovelace", "email": "ada@example.com", "department": "Research", "role": "Analyst"}
PRODUCT = {"name": "Widget", "sku": "WID-001", "price": "9.99", "category": "Hardware", "stock_quantity": 3}


@pytest.fixture
async def other_enterprise(make_enterprise):
    return await make_enterprise("Globex")


@pytest.fixture
async def tenant_admin(seeded, make_user):
    return await make_user("tenantadmin", seeded.roles["Admin"], seeded.enterprise)


@pytest.mark.asyncio
async def test_missing_module_permission(client: AsyncClient, seeded, make_user, login_as):
    user = await make_user("basic", seeded.roles["User"], seeded.enterprise)
    headers = await login_as(user.email)

    resp = await client.get("/api/users", headers=headers)
    assert resp.status_code == 403
    assert resp.json() == {"detail": "Access denied: No permissions for users module", "code": "forbidden"}

    assert (await client.get("/api/dashboard/stats", headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_missing_action_flag(client: AsyncClient, admin_headers, seeded, make_user, login_as):
    created = await client.post("/api/products", json=PRODUCT, headers=admin_headers)
    assert created.status_code == 201

    manager = await make_user("manager", seeded.roles["Manager"], seeded.enterprise)
    headers = await login_as(manager.email)

    resp = await client.delete(f"/api/products/{created.json()['id']}", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Access denied: Cannot delete products"

    resp = await client.put(f"/api/products/{created.json()['id']}", json={"stock_quantity": 10}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["stock_quantity"] == 10


@pytest.mark.asyncio
async def test_require_role_matches_exact_name(db_session, tenant_admin):
    principal = await get_user_by_id(db_session, tenant_admin.id)
    assert await require_role("Admin")(principal=principal) is principal
    with pytest.raises(Forbidden):
        await require_role("admin")(principal=principal)
    with pytest.raises(Forbidden):
        await require_role("Super Admin")(principal=principal)


@pytest.mark.asyncio
async def test_tenant_admin_sees_only_own_enterprise(
    client: AsyncClient, admin_headers, seeded, other_enterprise, tenant_admin, login_as
):
    ours = await client.post("/api/employees", json=EMPLOYEE, headers=admin_headers)
    theirs = await client.post(
        "/api/employees",
        json={**EMPLOYEE, "email": "grace@example.com", "enterprise_id": other_enterprise.id},
        headers=admin_headers,
    )
    assert ours.status_code == theirs.status_code == 201

    # Super admin sees both tenants
    resp = await client.get("/api/employees", headers=admin_headers)
    assert resp.json()["pagination"]["total"] == 2

    headers = await login_as(tenant_admin.email)
    resp = await client.get("/api/employees", headers=headers)
    assert [e["id"] for e in resp.json()["employees"]] == [ours.json()["id"]]

    # Asking for the other tenant explicitly changes nothing
    resp = await client.get(f"/api/employees?enterprise_id={other_enterprise.id}", headers=headers)
    assert resp.json()["pagination"]["total"] == 1

    resp = await client.get(f"/api/employees/{theirs.json()['id']}", headers=headers)
    assert resp.status_code == 404

    resp = await client.get("/api/enterprises", headers=headers)
    assert [e["name"] for e in resp.json()["enterprises"]] == ["Default Enterprise"]
    resp = await client.get(f"/api/enterprises/{other_enterprise.id}", headers=headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_tenant_admin_cannot_place_records_elsewhere(
    client: AsyncClient, other_enterprise, tenant_admin, login_as
):
    headers = await login_as(tenant_admin.email)
    resp = await client.post(
        "/api/products", json={**PRODUCT, "enterprise_id": other_enterprise.id}, headers=headers
    )
    assert resp.status_code == 403

    resp = await client.post("/api/products", json=PRODUCT, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["enterprise_id"] == tenant_admin.enterprise_id


@pytest.mark.asyncio
async def test_tenant_admin_cannot_grant_super_admin(client: AsyncClient, seeded, tenant_admin, login_as):
    headers = await login_as(tenant_admin.email)
    resp = await client.post(
        "/api/users",
        json={
            "username": "escalate",
            "email": "escalate@example.com",
            "password": "Esc4late!",
            "first_name": "Eve",
            "last_name": "Mallory",
            "role_id": seeded.super_role.id,
        },
        headers=headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_tenant_admin_cannot_manage_super_admin_accounts(
    client: AsyncClient, seeded, tenant_admin, make_user, login_as, settings
):
    other_root = await make_user("root2", seeded.super_role, seeded.enterprise)
    headers = await login_as(tenant_admin.email)

    for target in (seeded.admin.id, other_root.id):
        resp = await client.put(f"/api/users/{target}", json={"password": "Hijack3d!"}, headers=headers)
        assert resp.status_code == 403
        resp = await client.put(f"/api/users/{target}", json={"status": "locked"}, headers=headers)
        assert resp.status_code == 403
        resp = await client.delete(f"/api/users/{target}", headers=headers)
        assert resp.status_code == 403

    resp = await client.post(
        "/api/auth/login",
        json={"email": settings.bootstrap_admin_email, "password": "Hijack3d!"},
    )
    assert resp.status_code == 401
    await login_as(settings.bootstrap_admin_email, settings.bootstrap_admin_password)

    # Ordinary principals in the same enterprise stay manageable
    peer = await make_user("peer", seeded.roles["User"], seeded.enterprise)
    resp = await client.put(f"/api/users/{peer.id}", json={"first_name": "Renamed"}, headers=headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_dashboard_counts_are_scoped(
    client: AsyncClient, admin_headers, other_enterprise, tenant_admin, login_as
):
    await client.post("/api/products", json=PRODUCT, headers=admin_headers)
    await client.post(
        "/api/products",
        json={**PRODUCT, "sku": "WID-002", "category": "Tools", "enterprise_id": other_enterprise.id},
        headers=admin_headers,
    )

    global_stats = (await client.get("/api/dashboard/stats", headers=admin_headers)).json()
    assert global_stats["products"] == 2
    assert global_stats["enterprises"] == 2
    assert {g["key"]: g["count"] for g in global_stats["products_by_category"]} == {"Hardware": 1, "Tools": 1}

    headers = await login_as(tenant_admin.email)
    scoped = (await client.get("/api/dashboard/stats", headers=headers)).json()
    assert scoped["products"] == 1
    assert scoped["enterprises"] == 0
    assert scoped["users"] == 2

    assert [p["sku"] for p in scoped["recent_products"]] == ["WID-001"]
    assert {u["email"] for u in scoped["recent_users"]} == {tenant_admin.email, "superadmin@system.com"}
    assert len(scoped["user_growth"]) == 30
    assert scoped["user_growth"][-1]["count"] == 2
    assert sum(day["count"] for day in scoped["user_growth"]) == 2
    assert {p["sku"] for p in global_stats["recent_products"]} == {"WID-001", "WID-002"}


@pytest.mark.asyncio
async def test_dashboard_recent_lists_follow_the_range(client: AsyncClient, admin_headers, clock):
    await client.post("/api/employees", json=EMPLOYEE, headers=admin_headers)
    app.dependency_overrides[get_clock] = lambda: clock
    clock.now = utcnow() + timedelta(days=3)

    narrow = (await client.get("/api/dashboard/stats", params={"range": 1}, headers=admin_headers)).json()
    assert narrow["recent_employees"] == []
    assert narrow["recent_users"] == []
    assert narrow["employees"] == 1

    wide = (await client.get("/api/dashboard/stats", params={"range": 7}, headers=admin_headers)).json()
    assert [e["email"] for e in wide["recent_employees"]] == [EMPLOYEE["email"]]
    # Today's signups sit three days back in the growth series
    assert wide["user_growth"][-4]["count"] == 1

    resp = await client.get("/api/dashboard/stats", params={"range": 0}, headers=admin_headers)
    assert resp.status_code == 422
