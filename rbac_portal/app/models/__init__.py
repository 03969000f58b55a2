"""Models package."""

from rbac_portal.app.models.enterprise_orm import EnterpriseORM
from rbac_portal.app.models.role_orm import PermissionModule, RoleORM, RolePermissionORM
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.models.employee_orm import EmployeeORM
from rbac_portal.app.models.product_orm import ProductORM

__all__ = [
    "EnterpriseORM",
    "PermissionModule",
    "RoleORM",
    "RolePermissionORM",
    "UserORM",
    "EmployeeORM",
    "ProductORM",
]
