"""Dashboard statistics schema."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from rbac_portal.app.schemas.common import EnterpriseRef, RoleRef
from rbac_portal.app.schemas.employees import EmployeeResponse
from rbac_portal.app.schemas.products import ProductResponse


class GroupCount(BaseModel):
    key: Optional[str]
    count: int


class DailyCount(BaseModel):
    day: date
    count: int


class RecentUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime
    role: Optional[RoleRef] = None
    enterprise: Optional[EnterpriseRef] = None


class DashboardStats(BaseModel):
    """Counts and trends scoped to the caller's enterprise (global for super admins)."""
    users: int
    enterprises: int
    employees: int
    products: int
    recent_users: List[RecentUser] = []
    recent_employees: List[EmployeeResponse] = []
    recent_products: List[ProductResponse] = []
    user_growth: List[DailyCount] = []
    employees_by_department: List[GroupCount] = []
    products_by_category: List[GroupCount] = []
