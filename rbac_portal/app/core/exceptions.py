"""Domain errors for the authorization core and resource handlers.

Every error carries the HTTP status and a stable error code, so handlers
raise them directly and the exception handlers in ``main`` render them.
"""

from typing import Optional


class PortalError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400
    code: str = "bad_request"
    default_message: str = "Bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(PortalError):
    """Missing, malformed, expired or badly signed token, or the principal is gone."""

    status_code = 401
    code = "unauthenticated"
    default_message = "Authentication required"


class InvalidCredentials(PortalError):
    """Login failure. Deliberately says nothing about whether the email exists."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class AccountLocked(PortalError):
    status_code = 423
    code = "account_locked"
    default_message = "Account is locked"


class AccountInactive(PortalError):
    status_code = 403
    code = "account_inactive"
    default_message = "Account is inactive"


class Forbidden(PortalError):
    """Authenticated but not allowed: missing permission, role mismatch, system role."""

    status_code = 403
    code = "forbidden"
    default_message = "Access denied"


class InvalidOrExpiredToken(PortalError):
    """Password reset token is unknown, already used, or past its expiry."""

    status_code = 400
    code = "invalid_or_expired_token"
    default_message = "Invalid or expired reset token"


class NotFound(PortalError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class Conflict(PortalError):
    """The change would break a referential or uniqueness rule."""

    status_code = 409
    code = "conflict"
    default_message = "Conflict"
