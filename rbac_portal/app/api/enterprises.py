"""
Enterprise API Endpoints

Tenants. Principals confined to a tenant only ever see their own enterprise.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.api.pagination import PageParams, page_params, paginate, search_clause
from rbac_portal.app.core.database import get_db
from rbac_portal.app.core.exceptions import Conflict, NotFound
from rbac_portal.app.middleware.auth import ensure_in_scope, require_permission, tenant_scope
from rbac_portal.app.models.employee_orm import EmployeeORM
from rbac_portal.app.models.enterprise_orm import EnterpriseORM
from rbac_portal.app.models.product_orm import ProductORM
from rbac_portal.app.models.role_orm import PermissionModule
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.schemas.common import MessageResponse
from rbac_portal.app.schemas.enterprises import (
    EnterpriseCreate,
    EnterpriseList,
    EnterpriseResponse,
    EnterpriseUpdate,
)
from rbac_portal.app.services.permissions import Action

logger = logging.getLogger(__name__)
router = APIRouter()


async def _load_enterprise(db: AsyncSession, principal: UserORM, enterprise_id: str) -> EnterpriseORM:
    enterprise = await db.get(EnterpriseORM, enterprise_id)
    if enterprise is None:
        raise NotFound("Enterprise not found")
    ensure_in_scope(principal, enterprise.id, "Enterprise")
    return enterprise


@router.get("", response_model=EnterpriseList)
async def list_enterprises(
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.ENTERPRISES, Action.READ)),
):
    query = select(EnterpriseORM).order_by(EnterpriseORM.created_at.desc())
    scope = tenant_scope(principal)
    if scope is not None:
        query = query.where(EnterpriseORM.id == scope)
    if params.search:
        query = query.where(search_clause(params.search, EnterpriseORM.name, EnterpriseORM.location))
    enterprises, pagination = await paginate(db, query, params)
    return EnterpriseList(enterprises=enterprises, pagination=pagination)


@router.get("/{enterprise_id}", response_model=EnterpriseResponse)
async def get_enterprise(
    enterprise_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.ENTERPRISES, Action.READ)),
):
    return await _load_enterprise(db, principal, enterprise_id)


@router.post("", response_model=EnterpriseResponse, status_code=status.HTTP_201_CREATED)
async def create_enterprise(
    body: EnterpriseCreate,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.ENTERPRISES, Action.CREATE)),
):
    enterprise = EnterpriseORM(
        name=body.name,
        location=body.location,
        contact_info=body.contact_info.model_dump(exclude_none=True) if body.contact_info else None,
        status=body.status,
    )
    db.add(enterprise)
    await db.commit()
    logger.info(
        f"Enterprise created: {enterprise.name}",
        extra={"extra_data": {"enterprise_id": enterprise.id, "created_by": principal.id}},
    )
    return enterprise


@router.put("/{enterprise_id}", response_model=EnterpriseResponse)
async def update_enterprise(
    enterprise_id: str,
    body: EnterpriseUpdate,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.ENTERPRISES, Action.UPDATE)),
):
    enterprise = await _load_enterprise(db, principal, enterprise_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "contact_info" in changes:
        changes["contact_info"] = body.contact_info.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(enterprise, field, value)
    await db.commit()
    await db.refresh(enterprise)
    return enterprise


@router.delete("/{enterprise_id}", response_model=MessageResponse)
async def delete_enterprise(
    enterprise_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.ENTERPRISES, Action.DELETE)),
):
    enterprise = await _load_enterprise(db, principal, enterprise_id)

    for model in (UserORM, EmployeeORM, ProductORM):
        dependents = await db.scalar(
            select(func.count(model.id)).where(model.enterprise_id == enterprise.id)
        )
        if dependents:
            raise Conflict("Cannot delete enterprise with associated users, employees, or products")

    await db.delete(enterprise)
    await db.commit()
    logger.info(f"Enterprise deleted: {enterprise_id}", extra={"extra_data": {"deleted_by": principal.id}})
    return MessageResponse(message="Enterprise deleted successfully")
