"""
Account Lockout Tracker.

A principal's access is one of three states:

- Open: may attempt to log in / use its token.
- LockedUntil(until): automatic lock after too many failed logins; lifts by
  itself once ``until`` has passed (checked lazily, nothing sweeps it).
- Suspended: an administrator set ``status = "locked"``; stays until changed.

The same evaluation gates both login and per-request token verification.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from sqlalchemy import and_, case, null, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from rbac_portal.app.core.config import Settings
from rbac_portal.app.core.tokens import Clock, utcnow
from rbac_portal.app.models.user_orm import UserORM

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Open:
    pass


@dataclass(frozen=True)
class LockedUntil:
    until: datetime


@dataclass(frozen=True)
class Suspended:
    pass


AccessState = Union[Open, LockedUntil, Suspended]


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite hands them back) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def access_state(user: UserORM, now: datetime) -> AccessState:
    """Derive the access state of a principal at ``now``."""
    if user.status == "locked":
        return Suspended()
    locked_until = as_utc(user.locked_until)
    if locked_until is not None and now < locked_until:
        return LockedUntil(locked_until)
    return Open()


class LockoutTracker:
    """Counts failed logins and locks the account at the configured threshold.

    Args:
        settings: Supplies ``max_login_attempts`` and ``lockout_minutes``.
        clock: Source of "now".
    """

    def __init__(self, settings: Settings, clock: Clock = utcnow):
        self.threshold = settings.max_login_attempts
        self.duration = timedelta(minutes=settings.lockout_minutes)
        self._clock = clock

    def state(self, user: UserORM) -> AccessState:
        return access_state(user, self._clock())

    async def record_failure(self, session: AsyncSession, user: UserORM) -> AccessState:
        """Count one failed credential check as a single atomic UPDATE.

        The increment is computed by the database from the row's current value,
        so concurrent failures against the same user are never lost. A lock
        that has already expired restarts the count at this attempt.
        """
        now = self._clock()
        expired = and_(UserORM.locked_until.is_not(None), UserORM.locked_until <= now)
        attempts = case((expired, 0), else_=UserORM.login_attempts) + 1

        stmt = (
            update(UserORM)
            .where(UserORM.id == user.id)
            .values(
                login_attempts=attempts,
                locked_until=case(
                    (attempts >= self.threshold, now + self.duration),
                    (expired, null()),
                    else_=UserORM.locked_until,
                ),
            )
            .returning(UserORM.login_attempts, UserORM.locked_until)
            .execution_options(synchronize_session=False)
        )
        row = (await session.execute(stmt)).one()
        await session.flush()

        set_committed_value(user, "login_attempts", row.login_attempts)
        set_committed_value(user, "locked_until", row.locked_until)

        state = access_state(user, now)
        if isinstance(state, LockedUntil):
            logger.warning(
                f"Account locked after {row.login_attempts} failed login attempts",
                extra={"extra_data": {"user_id": user.id, "locked_until": state.until.isoformat()}},
            )
        return state

    async def record_success(self, session: AsyncSession, user: UserORM) -> None:
        """Reset the counter, clear any lock and stamp ``last_login``."""
        now = self._clock()
        await session.execute(
            update(UserORM)
            .where(UserORM.id == user.id)
            .values(login_attempts=0, locked_until=None, last_login=now)
            .execution_options(synchronize_session=False)
        )
        await session.flush()
        set_committed_value(user, "login_attempts", 0)
        set_committed_value(user, "locked_until", None)
        set_committed_value(user, "last_login", now)
