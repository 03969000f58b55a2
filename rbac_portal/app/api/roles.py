"""
Role API Endpoints

Role CRUD plus full replacement of a role's permission set. System roles
are read-only; a role still assigned to users cannot be deleted.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.api.pagination import PageParams, page_params, paginate, search_clause
from rbac_portal.app.core.database import get_db
from rbac_portal.app.core.exceptions import Conflict, Forbidden
from rbac_portal.app.middleware.auth import get_permission_service, require_permission
from rbac_portal.app.models.role_orm import PermissionModule, RoleORM
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.schemas.common import MessageResponse
from rbac_portal.app.schemas.roles import (
    PermissionUpdate,
    RoleCreate,
    RoleList,
    RoleResponse,
    RoleUpdate,
)
from rbac_portal.app.services.permissions import (
    Action,
    PermissionService,
    build_permission_rows,
    load_role,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: str = None) -> None:
    query = select(RoleORM.id).where(func.lower(RoleORM.name) == name.lower())
    if exclude_id:
        query = query.where(RoleORM.id != exclude_id)
    if await db.scalar(query):
        raise Conflict("Role name already exists")


@router.get("", response_model=RoleList)
async def list_roles(
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    _principal: UserORM = Depends(require_permission(PermissionModule.ROLES, Action.READ)),
):
    query = select(RoleORM).order_by(RoleORM.created_at.desc())
    if params.search:
        query = query.where(search_clause(params.search, RoleORM.name, RoleORM.description))
    roles, pagination = await paginate(db, query, params)
    return RoleList(roles=roles, pagination=pagination)


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    db: AsyncSession = Depends(get_db),
    _principal: UserORM = Depends(require_permission(PermissionModule.ROLES, Action.READ)),
):
    return await load_role(db, role_id)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    body: RoleCreate,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.ROLES, Action.CREATE)),
):
    """Create a custom role. Roles created here are never system or super-admin roles."""
    await _ensure_name_free(db, body.name)

    role = RoleORM(name=body.name, description=body.description)
    db.add(role)
    await db.flush()
    db.add_all(build_permission_rows(role.id, body.permissions))
    await db.commit()

    logger.info(
        f"Role created: {role.name}",
        extra={"extra_data": {"role_id": role.id, "created_by": principal.id}},
    )
    return await load_role(db, role.id, refresh=True)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    _principal: UserORM = Depends(require_permission(PermissionModule.ROLES, Action.UPDATE)),
):
    role = await load_role(db, role_id)
    if role.is_system_role:
        raise Forbidden("Cannot modify system role")

    if body.name is not None and body.name != role.name:
        await _ensure_name_free(db, body.name, exclude_id=role.id)
        role.name = body.name
    if body.description is not None:
        role.description = body.description
    await db.commit()
    return await load_role(db, role.id, refresh=True)


@router.put("/{role_id}/permissions", response_model=RoleResponse)
async def replace_role_permissions(
    role_id: str,
    body: PermissionUpdate,
    db: AsyncSession = Depends(get_db),
    permissions: PermissionService = Depends(get_permission_service),
    _principal: UserORM = Depends(require_permission(PermissionModule.ROLES, Action.UPDATE)),
):
    """Replace the role's whole permission set; modules left out lose all access."""
    return await permissions.replace_permissions(db, role_id, body.permissions)


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(
    role_id: str,
    db: AsyncSession = Depends(get_db),
    _principal: UserORM = Depends(require_permission(PermissionModule.ROLES, Action.DELETE)),
):
    role = await load_role(db, role_id)
    if role.is_system_role:
        raise Forbidden("Cannot delete system role")

    assigned = await db.scalar(select(func.count(UserORM.id)).where(UserORM.role_id == role.id))
    if assigned:
        raise Conflict("Cannot delete role that is assigned to users")

    await db.delete(role)
    await db.commit()
    logger.info(f"Role deleted: {role_id}")
    return MessageResponse(message="Role deleted successfully")
