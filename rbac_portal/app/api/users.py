"""
User API Endpoints

Principal administration, confined to the caller's enterprise unless the
caller holds a super-admin role.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.api.pagination import PageParams, page_params, paginate, search_clause
from rbac_portal.app.core.config import Settings, get_settings
from rbac_portal.app.core.database import get_db
from rbac_portal.app.core.exceptions import Conflict, Forbidden, NotFound
from rbac_portal.app.core.security import hash_password
from rbac_portal.app.middleware.auth import (
    ensure_in_scope,
    require_permission,
    resolve_enterprise_id,
    tenant_scope,
)
from rbac_portal.app.models.role_orm import PermissionModule, RoleORM
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.schemas.common import MessageResponse
from rbac_portal.app.schemas.users import UserCreate, UserList, UserResponse, UserUpdate
from rbac_portal.app.services.auth_service import get_user_by_id, normalize_email
from rbac_portal.app.services.permissions import Action

logger = logging.getLogger(__name__)
router = APIRouter()


async def _load_user(db: AsyncSession, principal: UserORM, user_id: str) -> UserORM:
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    ensure_in_scope(principal, user.enterprise_id, "User")
    return user


async def _assignable_role(db: AsyncSession, principal: UserORM, role_id: str) -> RoleORM:
    role = await db.get(RoleORM, role_id)
    if role is None:
        raise NotFound("Role not found")
    if role.is_super_admin and tenant_scope(principal) is not None:
        raise Forbidden("Access denied: Insufficient privileges")
    return role


def _ensure_manageable(principal: UserORM, user: UserORM) -> None:
    # Super-admin accounts are only managed by principals that are not confined to a tenant
    if tenant_scope(principal) is None:
        return
    if user.is_system or (user.role is not None and user.role.is_super_admin):
        raise Forbidden("Access denied: Insufficient privileges")


async def _ensure_identity_free(
    db: AsyncSession, email: Optional[str], username: Optional[str], exclude_id: Optional[str] = None
) -> None:
    clauses = []
    if email:
        clauses.append(UserORM.email == email)
    if username:
        clauses.append(UserORM.username == username)
    if not clauses:
        return
    query = select(UserORM.id).where(or_(*clauses))
    if exclude_id:
        query = query.where(UserORM.id != exclude_id)
    if await db.scalar(query.limit(1)):
        raise Conflict("User with this email or username already exists")


@router.get("", response_model=UserList)
async def list_users(
    params: PageParams = Depends(page_params),
    role_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.USERS, Action.READ)),
):
    query = select(UserORM).order_by(UserORM.created_at.desc())
    scope = tenant_scope(principal)
    if scope is not None:
        query = query.where(UserORM.enterprise_id == scope)
    if params.search:
        query = query.where(
            search_clause(params.search, UserORM.username, UserORM.email, UserORM.first_name, UserORM.last_name)
        )
    if role_id:
        query = query.where(UserORM.role_id == role_id)
    if status_filter:
        query = query.where(UserORM.status == status_filter)

    users, pagination = await paginate(db, query, params)
    return UserList(users=users, pagination=pagination)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.USERS, Action.READ)),
):
    return await _load_user(db, principal, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: UserORM = Depends(require_permission(PermissionModule.USERS, Action.CREATE)),
):
    email = normalize_email(body.email)
    await _ensure_identity_free(db, email, body.username)
    await _assignable_role(db, principal, body.role_id)
    enterprise_id = await resolve_enterprise_id(db, principal, body.enterprise_id)

    user = UserORM(
        username=body.username,
        email=email,
        password_hash=hash_password(body.password, rounds=settings.bcrypt_rounds),
        first_name=body.first_name,
        last_name=body.last_name,
        status=body.status,
        role_id=body.role_id,
        enterprise_id=enterprise_id,
    )
    db.add(user)
    await db.commit()

    logger.info(
        f"User created: {user.username}",
        extra={"extra_data": {"user_id": user.id, "created_by": principal.id}},
    )
    return await get_user_by_id(db, user.id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: UserORM = Depends(require_permission(PermissionModule.USERS, Action.UPDATE)),
):
    user = await _load_user(db, principal, user_id)
    _ensure_manageable(principal, user)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    email = normalize_email(changes["email"]) if "email" in changes else None
    await _ensure_identity_free(db, email, changes.get("username"), exclude_id=user.id)
    if "role_id" in changes:
        await _assignable_role(db, principal, changes["role_id"])
    if "enterprise_id" in changes:
        changes["enterprise_id"] = await resolve_enterprise_id(db, principal, changes["enterprise_id"])

    password = changes.pop("password", None)
    if password is not None:
        user.password_hash = hash_password(password, rounds=settings.bcrypt_rounds)
    if email is not None:
        changes["email"] = email
    if changes.get("status") == "active":
        # Reactivating an account also lifts any automatic lock
        user.login_attempts = 0
        user.locked_until = None

    for field, value in changes.items():
        setattr(user, field, value)
    await db.commit()
    return await get_user_by_id(db, user.id)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.USERS, Action.DELETE)),
):
    user = await _load_user(db, principal, user_id)
    _ensure_manageable(principal, user)
    if user.is_system:
        raise Forbidden("Cannot delete system administrator")
    if user.id == principal.id:
        raise Forbidden("Cannot delete your own account")

    await db.delete(user)
    await db.commit()
    logger.info(f"User deleted: {user_id}", extra={"extra_data": {"deleted_by": principal.id}})
    return MessageResponse(message="User deleted successfully")
