"""
Authentication Schemas

Request/response bodies for login and the password reset flow.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from rbac_portal.app.core.security import validate_password_strength
from rbac_portal.app.schemas.common import EnterpriseRef


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PermissionSummary(BaseModel):
    module: str
    can_create: bool
    can_read: bool
    can_update: bool
    can_delete: bool

    class Config:
        from_attributes = True


class RoleSummary(BaseModel):
    id: str
    name: str
    is_super_admin: bool
    permissions: list[PermissionSummary] = []

    class Config:
        from_attributes = True


class PrincipalSummary(BaseModel):
    """What the client needs to render a session: identity, role and tenant."""
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    status: str
    role: Optional[RoleSummary] = None
    enterprise: Optional[EnterpriseRef] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    user: PrincipalSummary


class ResetPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_strength(cls, value: str) -> str:
        validate_password_strength(value)
        return value
