"""
Password Reset Flow.

request_reset issues a fresh single-use token (overwriting any outstanding
one) and hands it to a delivery collaborator. confirm_reset exchanges the
token for a password change in one conditional UPDATE, so a token can be
consumed at most once even when two confirmations race.
"""

import logging
from datetime import timedelta
from typing import Optional, Protocol

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.core.config import Settings
from rbac_portal.app.core.exceptions import InvalidOrExpiredToken
from rbac_portal.app.core.security import hash_password
from rbac_portal.app.core.tokens import Clock, generate_reset_token, hash_token, utcnow
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.services.auth_service import get_user_by_email

logger = logging.getLogger(__name__)


class ResetTokenDelivery(Protocol):
    """Gets a freshly issued reset token to its owner (email, console, ...)."""

    async def deliver(self, user: UserORM, token: str) -> None:
        ...


class LogOnlyDelivery:
    """Default delivery: records that a token was issued, never the token itself."""

    async def deliver(self, user: UserORM, token: str) -> None:
        logger.info(
            "Password reset token issued",
            extra={"extra_data": {"user_id": user.id}},
        )


class PasswordResetService:
    """Issues and redeems password reset tokens.

    Args:
        settings: Supplies ``reset_token_expire_minutes`` and ``bcrypt_rounds``.
        delivery: Collaborator that sends the plaintext token to the user.
        clock: Source of "now".
    """

    def __init__(
        self,
        settings: Settings,
        delivery: Optional[ResetTokenDelivery] = None,
        clock: Clock = utcnow,
    ):
        self.lifetime = timedelta(minutes=settings.reset_token_expire_minutes)
        self.bcrypt_rounds = settings.bcrypt_rounds
        self.delivery = delivery or LogOnlyDelivery()
        self._clock = clock

    async def request_reset(self, db: AsyncSession, email: str) -> Optional[str]:
        """Issue a reset token for ``email``.

        Returns the plaintext token, or None when no account matches. Callers
        must answer both cases identically.
        """
        user = await get_user_by_email(db, email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None

        token = generate_reset_token()
        await db.execute(
            update(UserORM)
            .where(UserORM.id == user.id)
            .values(
                reset_password_token=hash_token(token),
                reset_password_expires=self._clock() + self.lifetime,
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        await self.delivery.deliver(user, token)
        return token

    async def confirm_reset(self, db: AsyncSession, token: str, new_password: str) -> str:
        """Set a new password using a reset token; returns the principal id.

        Also clears the reset token and any lockout on the account.

        Raises:
            InvalidOrExpiredToken: no account holds this token, or it has expired.
        """
        new_hash = hash_password(new_password, rounds=self.bcrypt_rounds)
        result = await db.execute(
            update(UserORM)
            .where(
                UserORM.reset_password_token == hash_token(token),
                UserORM.reset_password_expires > self._clock(),
            )
            .values(
                password_hash=new_hash,
                reset_password_token=None,
                reset_password_expires=None,
                login_attempts=0,
                locked_until=None,
            )
            .returning(UserORM.id)
            .execution_options(synchronize_session=False)
        )
        row = result.first()
        if row is None:
            logger.warning("Password reset rejected: invalid or expired token")
            raise InvalidOrExpiredToken()

        await db.commit()
        logger.info("Password reset successful", extra={"extra_data": {"user_id": row.id}})
        return row.id
