"""Product schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from rbac_portal.app.schemas.common import EnterpriseRef, Pagination

SKU_PATTERN = r"^[A-Z0-9-]+$"
ProductStatus = Literal["active", "inactive", "discontinued"]


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    sku: str = Field(..., min_length=3, max_length=50, pattern=SKU_PATTERN)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    category: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = None
    stock_quantity: int = Field(default=0, ge=0)
    status: ProductStatus = "active"
    enterprise_id: Optional[str] = Field(default=None, description="Defaults to the caller's enterprise")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    sku: Optional[str] = Field(default=None, min_length=3, max_length=50, pattern=SKU_PATTERN)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=2, max_length=50)
    description: Optional[str] = None
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    status: Optional[ProductStatus] = None
    enterprise_id: Optional[str] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    sku: str
    price: Decimal
    category: str
    description: Optional[str]
    stock_quantity: int
    status: str
    enterprise_id: str
    enterprise: Optional[EnterpriseRef] = None
    created_at: datetime
    updated_at: datetime


class ProductList(BaseModel):
    products: List[ProductResponse]
    pagination: Pagination
