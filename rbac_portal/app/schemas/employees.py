"""Employee schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from rbac_portal.app.schemas.common import EnterpriseRef, Pagination


class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    department: str = Field(..., min_length=2, max_length=50)
    role: str = Field(..., min_length=2, max_length=50, description="Job title")
    salary: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    status: Literal["active", "inactive"] = "active"
    enterprise_id: Optional[str] = Field(default=None, description="Defaults to the caller's enterprise")


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(default=None, min_length=2, max_length=50)
    role: Optional[str] = Field(default=None, min_length=2, max_length=50)
    salary: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    status: Optional[Literal["active", "inactive"]] = None
    enterprise_id: Optional[str] = None


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    department: str
    role: str
    salary: Optional[Decimal]
    status: str
    enterprise_id: str
    enterprise: Optional[EnterpriseRef] = None
    created_at: datetime
    updated_at: datetime


class EmployeeList(BaseModel):
    employees: List[EmployeeResponse]
    pagination: Pagination
