"""
Authentication and authorization guards.

Usage on a route:

    @router.get("/")
    async def list_users(principal: UserORM = Depends(require_permission(PermissionModule.USERS, Action.READ))):
        ...

``require_permission`` runs ``authenticate`` first, so every protected route
verifies the token, re-loads the principal and checks its current state on
each request. Nothing about the principal is cached between requests.
"""

import logging
from typing import Optional, Union

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.core.config import Settings, get_settings
from rbac_portal.app.core.database import get_db
from rbac_portal.app.core.exceptions import (
    AccountInactive,
    AccountLocked,
    Forbidden,
    NotFound,
    Unauthenticated,
)
from rbac_portal.app.core.logging import principal_id_ctx, tenant_id_ctx
from rbac_portal.app.core.security import bearer_scheme
from rbac_portal.app.core.tokens import Clock, ExpiredToken, TokenError, TokenService, utcnow
from rbac_portal.app.models.enterprise_orm import EnterpriseORM
from rbac_portal.app.models.role_orm import PermissionModule
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.services.auth_service import AuthService, get_user_by_id
from rbac_portal.app.services.lockout import LockedUntil, Suspended, access_state
from rbac_portal.app.services.password_reset import (
    LogOnlyDelivery,
    PasswordResetService,
    ResetTokenDelivery,
)
from rbac_portal.app.services.permissions import Action, PermissionService, can, denial_reason

logger = logging.getLogger(__name__)


def get_clock() -> Clock:
    """Override to move "now" for token, lock and reset checks."""
    return utcnow


def get_token_service(
    settings: Settings = Depends(get_settings), clock: Clock = Depends(get_clock)
) -> TokenService:
    return TokenService(settings, clock=clock)


def get_auth_service(
    settings: Settings = Depends(get_settings), clock: Clock = Depends(get_clock)
) -> AuthService:
    return AuthService(settings, clock=clock)


def get_reset_delivery() -> ResetTokenDelivery:
    """Override to plug in a real mail sender."""
    return LogOnlyDelivery()


def get_password_reset_service(
    settings: Settings = Depends(get_settings),
    delivery: ResetTokenDelivery = Depends(get_reset_delivery),
    clock: Clock = Depends(get_clock),
) -> PasswordResetService:
    return PasswordResetService(settings, delivery=delivery, clock=clock)


def get_permission_service() -> PermissionService:
    return PermissionService()


async def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    clock: Clock = Depends(get_clock),
) -> UserORM:
    """Resolve the bearer token to a principal with its role and permissions loaded.

    Raises:
        Unauthenticated: no/invalid/expired token, or the principal no longer exists.
        AccountLocked: administratively suspended or inside an automatic lock window.
        AccountInactive: the account is deactivated.
    """
    if credentials is None:
        raise Unauthenticated("Access token required")

    try:
        claims = tokens.verify(credentials.credentials)
    except ExpiredToken:
        raise Unauthenticated("Token expired") from None
    except TokenError as exc:
        logger.info(f"Rejected session token: {exc}")
        raise Unauthenticated("Invalid token") from None

    # The token only names the principal; its current state comes from the store
    user = await get_user_by_id(db, claims.sub)
    if user is None:
        raise Unauthenticated("User not found")

    state = access_state(user, clock())
    if isinstance(state, (Suspended, LockedUntil)):
        raise AccountLocked("Account is locked")
    if user.status == "inactive":
        raise AccountInactive()

    request.state.principal = user
    principal_id_ctx.set(user.id)
    tenant_id_ctx.set(user.enterprise_id)
    return user


def require_permission(module: PermissionModule, action: Union[Action, str]):
    """Dependency factory: the principal's role must allow ``action`` on ``module``."""

    async def permission_checker(principal: UserORM = Depends(authenticate)) -> UserORM:
        if not can(principal.role, module, action):
            reason = denial_reason(principal.role, module, action)
            logger.warning(
                reason,
                extra={"extra_data": {"module": getattr(module, "value", module), "action": getattr(action, "value", action)}},
            )
            raise Forbidden(reason)
        return principal

    return permission_checker


def require_role(role_name: str):
    """Dependency factory: the principal's role name must equal ``role_name`` exactly."""

    async def role_checker(principal: UserORM = Depends(authenticate)) -> UserORM:
        if principal.role is None or principal.role.name != role_name:
            raise Forbidden("Access denied: Insufficient privileges")
        return principal

    return role_checker


def tenant_scope(principal: UserORM) -> Optional[str]:
    """Enterprise the principal's data access is confined to; None for super admins."""
    if principal.role is not None and principal.role.is_super_admin:
        return None
    return principal.enterprise_id


def ensure_in_scope(principal: UserORM, enterprise_id: str, what: str = "Resource") -> None:
    """Hide records of other tenants behind a 404."""
    scope = tenant_scope(principal)
    if scope is not None and scope != enterprise_id:
        raise NotFound(f"{what} not found")


async def resolve_enterprise_id(db: AsyncSession, principal: UserORM, requested: Optional[str]) -> str:
    """Enterprise a new or moved record should belong to.

    Defaults to the principal's own enterprise. Principals confined to a
    tenant cannot place records anywhere else.
    """
    enterprise_id = requested or principal.enterprise_id
    scope = tenant_scope(principal)
    if scope is not None and enterprise_id != scope:
        raise Forbidden("Access denied: Cannot assign records to another enterprise")
    if await db.get(EnterpriseORM, enterprise_id) is None:
        raise NotFound("Enterprise not found")
    return enterprise_id
