"""
Employee API Endpoints

Tenant-scoped employee records.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.api.pagination import PageParams, page_params, paginate, search_clause
from rbac_portal.app.core.database import get_db
from rbac_portal.app.core.exceptions import NotFound
from rbac_portal.app.middleware.auth import (
    ensure_in_scope,
    require_permission,
    resolve_enterprise_id,
    tenant_scope,
)
from rbac_portal.app.models.employee_orm import EmployeeORM
from rbac_portal.app.models.role_orm import PermissionModule
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.schemas.common import MessageResponse
from rbac_portal.app.schemas.employees import (
    EmployeeCreate,
    EmployeeList,
    EmployeeResponse,
    EmployeeUpdate,
)
from rbac_portal.app.services.permissions import Action

logger = logging.getLogger(__name__)
router = APIRouter()


async def _load_employee(db: AsyncSession, principal: UserORM, employee_id: str) -> EmployeeORM:
    employee = await db.get(EmployeeORM, employee_id, populate_existing=True)
    if employee is None:
        raise NotFound("Employee not found")
    ensure_in_scope(principal, employee.enterprise_id, "Employee")
    return employee


@router.get("", response_model=EmployeeList)
async def list_employees(
    params: PageParams = Depends(page_params),
    enterprise_id: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.EMPLOYEES, Action.READ)),
):
    query = select(EmployeeORM).order_by(EmployeeORM.created_at.desc())
    scope = tenant_scope(principal)
    if scope is not None:
        query = query.where(EmployeeORM.enterprise_id == scope)
    elif enterprise_id:
        query = query.where(EmployeeORM.enterprise_id == enterprise_id)
    if params.search:
        query = query.where(
            search_clause(params.search, EmployeeORM.name, EmployeeORM.email, EmployeeORM.department, EmployeeORM.role)
        )
    if department:
        query = query.where(EmployeeORM.department == department)
    if status_filter:
        query = query.where(EmployeeORM.status == status_filter)

    employees, pagination = await paginate(db, query, params)
    return EmployeeList(employees=employees, pagination=pagination)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.EMPLOYEES, Action.READ)),
):
    return await _load_employee(db, principal, employee_id)


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.EMPLOYEES, Action.CREATE)),
):
    enterprise_id = await resolve_enterprise_id(db, principal, body.enterprise_id)
    employee = EmployeeORM(**body.model_dump(exclude={"enterprise_id"}), enterprise_id=enterprise_id)
    db.add(employee)
    await db.commit()
    logger.info(
        f"Employee created: {employee.id}",
        extra={"extra_data": {"enterprise_id": enterprise_id, "created_by": principal.id}},
    )
    return await _load_employee(db, principal, employee.id)


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.EMPLOYEES, Action.UPDATE)),
):
    employee = await _load_employee(db, principal, employee_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "enterprise_id" in changes:
        changes["enterprise_id"] = await resolve_enterprise_id(db, principal, changes["enterprise_id"])
    for field, value in changes.items():
        setattr(employee, field, value)
    await db.commit()
    return await _load_employee(db, principal, employee.id)


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.EMPLOYEES, Action.DELETE)),
):
    employee = await _load_employee(db, principal, employee_id)
    await db.delete(employee)
    await db.commit()
    logger.info(f"Employee deleted: {employee_id}", extra={"extra_data": {"deleted_by": principal.id}})
    return MessageResponse(message="Employee deleted successfully")
