"""Services package."""

from rbac_portal.app.services.auth_service import AuthService
from rbac_portal.app.services.lockout import LockoutTracker
from rbac_portal.app.services.password_reset import PasswordResetService
from rbac_portal.app.services.permissions import Action, PermissionService, can

__all__ = [
    "Action",
    "AuthService",
    "LockoutTracker",
    "PasswordResetService",
    "PermissionService",
    "can",
]
