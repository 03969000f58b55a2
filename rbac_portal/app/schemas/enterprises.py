"""Enterprise (tenant) schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from rbac_portal.app.schemas.common import Pagination


class ContactInfo(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    website: Optional[str] = Field(default=None, max_length=255)


class EnterpriseCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    location: Optional[str] = Field(default=None, max_length=255)
    contact_info: Optional[ContactInfo] = None
    status: Literal["active", "inactive"] = "active"


class EnterpriseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    location: Optional[str] = Field(default=None, max_length=255)
    contact_info: Optional[ContactInfo] = None
    status: Optional[Literal["active", "inactive"]] = None


class EnterpriseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    location: Optional[str]
    contact_info: Optional[dict]
    status: str
    created_at: datetime
    updated_at: datetime


class EnterpriseList(BaseModel):
    enterprises: List[EnterpriseResponse]
    pagination: Pagination
