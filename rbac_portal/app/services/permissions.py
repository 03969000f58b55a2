"""
Permission Table.

Answers "may this role perform <action> on <module>?" from the role's
permission rows, and replaces a role's whole permission set atomically.
"""

import logging
from enum import Enum
from typing import Iterable, Optional, Protocol, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rbac_portal.app.core.exceptions import Conflict, Forbidden, NotFound
from rbac_portal.app.models.role_orm import PermissionModule, RoleORM, RolePermissionORM

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


# Fixed mapping from action to the boolean column it reads
ACTION_FLAGS = {
    Action.CREATE: "can_create",
    Action.READ: "can_read",
    Action.UPDATE: "can_update",
    Action.DELETE: "can_delete",
}


class PermissionGrant(Protocol):
    """Anything shaped like one permission row (request schemas, seed data)."""
    module: PermissionModule
    can_create: bool
    can_read: bool
    can_update: bool
    can_delete: bool


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


def find_permission(role: RoleORM, module: Union[PermissionModule, str]) -> Optional[RolePermissionORM]:
    """Return the role's permission row for ``module``, or None if there is none."""
    module = _coerce(PermissionModule, module)
    if module is None:
        return None
    for row in role.permissions or []:
        if row.module == module.value:
            return row
    return None


def can(role: Optional[RoleORM], module: Union[PermissionModule, str], action: Union[Action, str]) -> bool:
    """Decide whether ``role`` may perform ``action`` on ``module``.

    Super-admin roles are allowed everything. For any other role a missing
    permission row, an unknown module or an unknown action is a deny.
    """
    if role is None:
        return False
    if role.is_super_admin:
        return True

    action = _coerce(Action, action)
    if action is None:
        return False
    row = find_permission(role, module)
    if row is None:
        return False
    return bool(getattr(row, ACTION_FLAGS[action]))


def denial_reason(role: Optional[RoleORM], module: Union[PermissionModule, str], action: Union[Action, str]) -> str:
    """Human readable explanation for a failed ``can`` check."""
    module_name = getattr(module, "value", module)
    action_name = getattr(action, "value", action)
    if role is None:
        return "Access denied: No role assigned"
    if find_permission(role, module) is None:
        return f"Access denied: No permissions for {module_name} module"
    return f"Access denied: Cannot {action_name} {module_name}"


async def load_role(session: AsyncSession, role_id: str, refresh: bool = False) -> RoleORM:
    """Fetch a role with its permission rows, raising NotFound if absent."""
    query = select(RoleORM).options(selectinload(RoleORM.permissions)).where(RoleORM.id == role_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await session.execute(query)
    role = result.scalar_one_or_none()
    if role is None:
        raise NotFound("Role not found")
    return role


def build_permission_rows(role_id: str, grants: Iterable[PermissionGrant]) -> list[RolePermissionORM]:
    return [
        RolePermissionORM(
            role_id=role_id,
            module=_coerce(PermissionModule, grant.module).value,
            can_create=bool(grant.can_create),
            can_read=bool(grant.can_read),
            can_update=bool(grant.can_update),
            can_delete=bool(grant.can_delete),
        )
        for grant in grants
    ]


class PermissionService:
    """Writes to the permission table."""

    async def replace_permissions(
        self,
        session: AsyncSession,
        role_id: str,
        grants: Iterable[PermissionGrant],
    ) -> RoleORM:
        """Replace every permission row of a role in one transaction.

        Either the whole new set is committed or, on failure, the transaction
        is rolled back and the previous set stays in effect.

        Raises:
            NotFound: no such role.
            Forbidden: the role is a system role.
            Conflict: the new set violates a constraint (e.g. a duplicate module).
        """
        role = await load_role(session, role_id)
        if role.is_system_role:
            raise Forbidden("Cannot modify system role permissions")

        grants = list(grants)
        if any(_coerce(PermissionModule, grant.module) is None for grant in grants):
            raise Conflict("Permission set references an unknown module")

        try:
            await session.execute(
                delete(RolePermissionORM).where(RolePermissionORM.role_id == role.id)
            )
            session.add_all(build_permission_rows(role.id, grants))
            await session.flush()
        except IntegrityError as exc:
            await session.rollback()
            logger.warning(
                f"Permission replace rejected for role {role_id}; previous set kept",
                extra={"extra_data": {"role_id": role_id, "error": type(exc).__name__}},
            )
            raise Conflict("Permission set rejected; previous permissions are unchanged") from None

        await session.commit()
        logger.info(
            f"Permissions replaced for role {role_id}",
            extra={"extra_data": {"role_id": role_id, "modules": [getattr(g.module, "value", g.module) for g in grants]}},
        )
        return await load_role(session, role_id, refresh=True)
