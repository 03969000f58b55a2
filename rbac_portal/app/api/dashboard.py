"""
Dashboard API Endpoints

Headline counts and recent activity for the landing page, confined to the
caller's enterprise unless the caller holds a super-admin role.
"""

from datetime import date, datetime, time, timedelta, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.core.database import get_db
from rbac_portal.app.core.tokens import Clock
from rbac_portal.app.middleware.auth import get_clock, require_permission, tenant_scope
from rbac_portal.app.models.employee_orm import EmployeeORM
from rbac_portal.app.models.enterprise_orm import EnterpriseORM
from rbac_portal.app.models.product_orm import ProductORM
from rbac_portal.app.models.role_orm import PermissionModule
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.schemas.dashboard import DailyCount, DashboardStats, GroupCount, RecentUser
from rbac_portal.app.schemas.employees import EmployeeResponse
from rbac_portal.app.schemas.products import ProductResponse
from rbac_portal.app.services.permissions import Action

router = APIRouter()

RECENT_LIMIT = 5
GROWTH_DAYS = 30


def _scoped(query, model, scope):
    if scope is not None:
        query = query.where(model.enterprise_id == scope)
    return query


async def _count(db: AsyncSession, model, scope):
    return await db.scalar(_scoped(select(func.count(model.id)), model, scope)) or 0


async def _group_counts(db: AsyncSession, column, model, scope) -> list[GroupCount]:
    query = _scoped(select(column, func.count(model.id)).group_by(column).order_by(column), model, scope)
    result = await db.execute(query)
    return [GroupCount(key=key, count=count) for key, count in result.all()]


async def _recent(db: AsyncSession, model, schema, scope, since: datetime):
    query = (
        select(model)
        .where(model.created_at >= since)
        .order_by(model.created_at.desc())
        .limit(RECENT_LIMIT)
    )
    result = await db.execute(_scoped(query, model, scope))
    return [schema.model_validate(row) for row in result.scalars().all()]


async def _user_growth(db: AsyncSession, scope, today: date) -> list[DailyCount]:
    """Users created per day over the last 30 days, oldest first, zero-filled."""
    first_day = today - timedelta(days=GROWTH_DAYS - 1)
    day = func.date(UserORM.created_at)
    query = _scoped(
        select(day, func.count(UserORM.id))
        .where(UserORM.created_at >= datetime.combine(first_day, time.min, tzinfo=timezone.utc))
        .group_by(day),
        UserORM,
        scope,
    )
    result = await db.execute(query)
    # SQLite answers DATE() with a string, Postgres with a date
    counts = {str(key): count for key, count in result.all()}
    days = (first_day + timedelta(days=offset) for offset in range(GROWTH_DAYS))
    return [DailyCount(day=d, count=counts.get(d.isoformat(), 0)) for d in days]


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    range_days: int = Query(30, alias="range", ge=1, le=365, description="Window for the recent lists, in days"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    principal: UserORM = Depends(require_permission(PermissionModule.DASHBOARD, Action.READ)),
):
    scope = tenant_scope(principal)
    now = clock()
    since = now - timedelta(days=range_days)

    # Only super admins see the tenant count
    enterprises = await db.scalar(select(func.count(EnterpriseORM.id))) if scope is None else 0

    return DashboardStats(
        users=await _count(db, UserORM, scope),
        enterprises=enterprises or 0,
        employees=await _count(db, EmployeeORM, scope),
        products=await _count(db, ProductORM, scope),
        recent_users=await _recent(db, UserORM, RecentUser, scope, since),
        recent_employees=await _recent(db, EmployeeORM, EmployeeResponse, scope, since),
        recent_products=await _recent(db, ProductORM, ProductResponse, scope, since),
        user_growth=await _user_growth(db, scope, now.astimezone(timezone.utc).date()),
        employees_by_department=await _group_counts(db, EmployeeORM.department, EmployeeORM, scope),
        products_by_category=await _group_counts(db, ProductORM.category, ProductORM, scope),
    )
