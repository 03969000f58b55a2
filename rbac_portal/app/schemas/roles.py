"""
Role Schemas

Pydantic models for role CRUD and permission replacement.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rbac_portal.app.models.role_orm import PermissionModule
from rbac_portal.app.schemas.common import NAME_PATTERN, Pagination


class RolePermissionIn(BaseModel):
    """One module's CRUD flags. Omitted flags default to False."""
    module: PermissionModule
    can_create: bool = False
    can_read: bool = False
    can_update: bool = False
    can_delete: bool = False


class RolePermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    module: str
    can_create: bool
    can_read: bool
    can_update: bool
    can_delete: bool


def _unique_modules(value: List[RolePermissionIn]) -> List[RolePermissionIn]:
    modules = [p.module for p in value]
    if len(modules) != len(set(modules)):
        raise ValueError("Each module may appear at most once")
    return value


class PermissionUpdate(BaseModel):
    """Full replacement of a role's permission set."""
    permissions: List[RolePermissionIn]

    @field_validator("permissions")
    @classmethod
    def unique_modules(cls, value: List[RolePermissionIn]) -> List[RolePermissionIn]:
        return _unique_modules(value)


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    description: Optional[str] = Field(default=None, max_length=255)
    permissions: List[RolePermissionIn] = Field(default_factory=list)

    @field_validator("permissions")
    @classmethod
    def unique_modules(cls, value: List[RolePermissionIn]) -> List[RolePermissionIn]:
        return _unique_modules(value)


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50, pattern=NAME_PATTERN)
    description: Optional[str] = Field(default=None, max_length=255)


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str]
    is_system_role: bool
    is_super_admin: bool
    permissions: List[RolePermissionOut] = []
    created_at: datetime
    updated_at: datetime


class RoleList(BaseModel):
    roles: List[RoleResponse]
    pagination: Pagination
