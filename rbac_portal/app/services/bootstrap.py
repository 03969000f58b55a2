"""Seed the default tenant, roles, permission matrix and bootstrap principal."""

import logging
from types import SimpleNamespace

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.core.config import Settings
from rbac_portal.app.core.security import hash_password
from rbac_portal.app.models.enterprise_orm import EnterpriseORM
from rbac_portal.app.models.role_orm import PermissionModule, RoleORM
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.services.permissions import build_permission_rows

logger = logging.getLogger(__name__)

SUPER_ADMIN_ROLE = "Super Admin"

_ALL_MODULES = list(PermissionModule)


def _grant(module, create=False, read=False, update=False, delete=False):
    return SimpleNamespace(
        module=module, can_create=create, can_read=read, can_update=update, can_delete=delete
    )


def _admin_grants():
    # Full access except managing roles and enterprises, and no deleting users
    grants = []
    for module in _ALL_MODULES:
        manage = module not in (PermissionModule.ROLES, PermissionModule.ENTERPRISES)
        grants.append(_grant(
            module,
            create=manage,
            read=True,
            update=manage,
            delete=manage and module != PermissionModule.USERS,
        ))
    return grants


def _manager_grants():
    writable = (PermissionModule.EMPLOYEES, PermissionModule.PRODUCTS)
    modules = (
        PermissionModule.DASHBOARD,
        PermissionModule.EMPLOYEES,
        PermissionModule.PRODUCTS,
        PermissionModule.REPORTS,
    )
    return [_grant(m, create=m in writable, read=True, update=m in writable) for m in modules]


DEFAULT_ROLES = [
    # name, description, system, super admin, grants
    (SUPER_ADMIN_ROLE, "Full system access with all permissions", True, True,
     [_grant(m, True, True, True, True) for m in _ALL_MODULES]),
    ("Admin", "Full access within enterprise scope", False, False, _admin_grants()),
    ("Manager", "Manage employees and products, view reports", False, False, _manager_grants()),
    ("User", "Basic access to assigned modules", False, False,
     [_grant(PermissionModule.DASHBOARD, read=True)]),
]


async def seed_defaults(db: AsyncSession, settings: Settings) -> None:
    """Seed defaults on first startup. The admin password comes from the environment."""
    existing = await db.execute(select(RoleORM).limit(1))
    if existing.scalar_one_or_none():
        return

    enterprise = EnterpriseORM(
        name="Default Enterprise",
        location="San Francisco, CA",
        contact_info={"email": settings.bootstrap_admin_email},
        status="active",
    )
    db.add(enterprise)

    roles = {}
    for name, description, is_system, is_super, grants in DEFAULT_ROLES:
        role = RoleORM(
            name=name,
            description=description,
            is_system_role=is_system,
            is_super_admin=is_super,
        )
        db.add(role)
        await db.flush()
        db.add_all(build_permission_rows(role.id, grants))
        roles[name] = role
    await db.flush()

    if settings.bootstrap_admin_password:
        db.add(UserORM(
            username="superadmin",
            email=settings.bootstrap_admin_email.lower(),
            password_hash=hash_password(settings.bootstrap_admin_password, rounds=settings.bcrypt_rounds),
            first_name="Super",
            last_name="Administrator",
            status="active",
            role_id=roles[SUPER_ADMIN_ROLE].id,
            enterprise_id=enterprise.id,
            is_system=True,
        ))
    else:
        logger.warning("BOOTSTRAP_ADMIN_PASSWORD not set; no bootstrap principal created")

    await db.commit()
    logger.info(f"Seeded default enterprise and {len(DEFAULT_ROLES)} roles")
