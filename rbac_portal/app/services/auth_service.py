"""
Login flow.

Checks the lockout state before the password, records the outcome with the
LockoutTracker and mints a session token on success. Every credential
failure surfaces as the same InvalidCredentials error whether or not the
email exists.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.core.config import Settings
from rbac_portal.app.core.exceptions import AccountInactive, AccountLocked, InvalidCredentials
from rbac_portal.app.core.security import verify_password
from rbac_portal.app.core.tokens import Clock, TokenService, utcnow
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.services.lockout import LockedUntil, LockoutTracker, Suspended

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[UserORM]:
    result = await db.execute(
        select(UserORM)
        .where(func.lower(UserORM.email) == normalize_email(email))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[UserORM]:
    result = await db.execute(
        select(UserORM).where(UserORM.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


@dataclass
class LoginResult:
    token: str
    user: UserORM


class AuthService:
    """Authenticates principals by email and password."""

    def __init__(self, settings: Settings, clock: Clock = utcnow):
        self.tokens = TokenService(settings, clock=clock)
        self.lockout = LockoutTracker(settings, clock=clock)

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a session token.

        Raises:
            InvalidCredentials: unknown email or wrong password.
            AccountLocked: automatic lock still active, or administratively suspended.
            AccountInactive: correct password but the account is deactivated.
        """
        user = await get_user_by_email(db, email)
        if user is None:
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()

        state = self.lockout.state(user)
        if isinstance(state, Suspended):
            logger.info("Login rejected: account suspended", extra={"extra_data": {"user_id": user.id}})
            raise AccountLocked("Account is locked")
        if isinstance(state, LockedUntil):
            # Locked accounts do not evaluate the password nor count further attempts
            logger.info("Login rejected: account temporarily locked", extra={"extra_data": {"user_id": user.id}})
            raise AccountLocked("Account is temporarily locked")

        if not verify_password(password, user.password_hash):
            await self.lockout.record_failure(db, user)
            await db.commit()
            logger.info(
                "Login failed: wrong password",
                extra={"extra_data": {"user_id": user.id, "login_attempts": user.login_attempts}},
            )
            raise InvalidCredentials()

        if user.status == "inactive":
            raise AccountInactive()

        await self.lockout.record_success(db, user)
        await db.commit()

        token = self.tokens.issue(user.id, email=user.email)
        logger.info("Login successful", extra={"extra_data": {"user_id": user.id}})
        return LoginResult(token=token, user=user)
