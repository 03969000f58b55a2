"""
User Schemas

Pydantic models for user administration. Password hashes and reset token
digests never leave the service.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from rbac_portal.app.core.security import validate_password_strength
from rbac_portal.app.schemas.common import NAME_PATTERN, EnterpriseRef, Pagination, RoleRef

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"
UserStatus = Literal["active", "inactive", "locked"]


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str
    first_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    role_id: str
    enterprise_id: Optional[str] = Field(default=None, description="Defaults to the caller's enterprise")
    status: UserStatus = "active"

    @field_validator("password")
    @classmethod
    def check_strength(cls, value: str) -> str:
        validate_password_strength(value)
        return value


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=NAME_PATTERN)
    role_id: Optional[str] = None
    enterprise_id: Optional[str] = None
    status: Optional[UserStatus] = None

    @field_validator("password")
    @classmethod
    def check_strength(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            validate_password_strength(value)
        return value


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    status: str
    login_attempts: int
    locked_until: Optional[datetime] = None
    last_login: Optional[datetime] = None
    is_system: bool
    role: Optional[RoleRef] = None
    enterprise: Optional[EnterpriseRef] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserList(BaseModel):
    users: List[UserResponse]
    pagination: Pagination
