"""
Pytest configuration and fixtures.
"""

import os
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import AsyncGenerator

# Settings require a signing secret; set it before the app is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-secret-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rbac_portal.app.core.config import Settings, get_settings
from rbac_portal.app.core import database
from rbac_portal.app.core.database import Base, get_db
from rbac_portal.app.core.security import hash_password
from rbac_portal.app.main import app
from rbac_portal.app.models import EnterpriseORM, RoleORM, UserORM
from rbac_portal.app.services.bootstrap import SUPER_ADMIN_ROLE, seed_defaults

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "superadmin@system.com"
ADMIN_PASSWORD = "Admin@123"
USER_PASSWORD = "Passw0rd!"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture
def session_factory(monkeypatch):
    """Point out-of-request sessions at the test database."""
    monkeypatch.setattr(database, "async_session_maker", TestingSessionLocal)
    return TestingSessionLocal


@pytest.fixture
def settings() -> Settings:
    """Fast hashing and a known bootstrap password."""
    return Settings(
        bcrypt_rounds=4,
        bootstrap_admin_email=ADMIN_EMAIL,
        bootstrap_admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Creates a fresh schema and session for a test, dropped afterwards.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestingSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Each test runs on its own event loop; do not carry the connection over
    await engine.dispose()


@pytest.fixture
async def seeded(db_session: AsyncSession, settings: Settings) -> SimpleNamespace:
    """Default enterprise, the four default roles and the bootstrap principal."""
    await seed_defaults(db_session, settings)

    roles = {
        role.name: role
        for role in (await db_session.execute(select(RoleORM))).scalars().all()
    }
    enterprise = (
        await db_session.execute(select(EnterpriseORM).where(EnterpriseORM.name == "Default Enterprise"))
    ).scalar_one()
    admin = (
        await db_session.execute(select(UserORM).where(UserORM.email == ADMIN_EMAIL))
    ).scalar_one()
    return SimpleNamespace(roles=roles, enterprise=enterprise, admin=admin, super_role=roles[SUPER_ADMIN_ROLE])


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory that commits a principal with the given role and enterprise."""

    async def _make_user(
        username: str,
        role: RoleORM,
        enterprise: EnterpriseORM,
        password: str = USER_PASSWORD,
        status: str = "active",
    ) -> UserORM:
        user = UserORM(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password, rounds=4),
            first_name="Test",
            last_name="User",
            status=status,
            role_id=role.id,
            enterprise_id=enterprise.id,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_enterprise(db_session: AsyncSession):
    async def _make_enterprise(name: str) -> EnterpriseORM:
        enterprise = EnterpriseORM(name=name, location="Remote", status="active")
        db_session.add(enterprise)
        await db_session.commit()
        return enterprise

    return _make_enterprise


@pytest.fixture
async def client(db_session: AsyncSession, settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with the database and settings dependencies overridden.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client: AsyncClient):
    """Log in and return the Authorization header for the session."""

    async def _login(email: str, password: str = USER_PASSWORD) -> dict:
        resp = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login


@pytest.fixture
async def admin_headers(login_as, seeded: SimpleNamespace) -> dict:
    return await login_as(ADMIN_EMAIL, ADMIN_PASSWORD)


class FakeClock:
    """Settable stand-in for utcnow."""

    def __init__(self, start: datetime):
        self.start = start
        self.now = start

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))
