"""
Credential handling for the RBAC portal.

Password hashing uses bcrypt directly with a configurable cost factor.
The strength policy is enforced at the API boundary (request schemas),
before anything is hashed.
"""

import logging
import re

import bcrypt
from fastapi.security import HTTPBearer

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches the guard and becomes our 401
bearer_scheme = HTTPBearer(auto_error=False, description="Session token from /api/auth/login")

DEFAULT_BCRYPT_ROUNDS = 12
PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = "@$!%*?&"

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
    (re.compile(f"[{re.escape(PASSWORD_SYMBOLS)}]"), f"one special character ({PASSWORD_SYMBOLS})"),
)


def hash_password(plain: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(plain.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash. A corrupt hash never verifies."""
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.error("Password verification failed: stored hash is not a valid bcrypt hash")
        return False


def password_policy_violations(plain: str) -> list[str]:
    """Return the unmet requirements of the password policy (empty when acceptable)."""
    problems = []
    if len(plain) < PASSWORD_MIN_LENGTH:
        problems.append(f"at least {PASSWORD_MIN_LENGTH} characters")
    for pattern, requirement in _PASSWORD_RULES:
        if not pattern.search(plain):
            problems.append(requirement)
    return problems


def validate_password_strength(plain: str) -> str:
    """Pydantic-friendly validator: returns the password or raises ValueError."""
    problems = password_policy_violations(plain)
    if problems:
        raise ValueError("Password must contain " + ", ".join(problems))
    return plain
