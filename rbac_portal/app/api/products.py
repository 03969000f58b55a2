"""
Product API Endpoints

Tenant-scoped product catalogue. SKUs are unique across all tenants.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.api.pagination import PageParams, page_params, paginate, search_clause
from rbac_portal.app.core.database import get_db
from rbac_portal.app.core.exceptions import Conflict, NotFound
from rbac_portal.app.middleware.auth import (
    ensure_in_scope,
    require_permission,
    resolve_enterprise_id,
    tenant_scope,
)
from rbac_portal.app.models.product_orm import ProductORM
from rbac_portal.app.models.role_orm import PermissionModule
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.schemas.common import MessageResponse
from rbac_portal.app.schemas.products import (
    ProductCreate,
    ProductList,
    ProductResponse,
    ProductUpdate,
)
from rbac_portal.app.services.permissions import Action

logger = logging.getLogger(__name__)
router = APIRouter()


async def _load_product(db: AsyncSession, principal: UserORM, product_id: str) -> ProductORM:
    product = await db.get(ProductORM, product_id, populate_existing=True)
    if product is None:
        raise NotFound("Product not found")
    ensure_in_scope(principal, product.enterprise_id, "Product")
    return product


async def _ensure_sku_free(db: AsyncSession, sku: str, exclude_id: Optional[str] = None) -> None:
    query = select(ProductORM.id).where(ProductORM.sku == sku)
    if exclude_id:
        query = query.where(ProductORM.id != exclude_id)
    if await db.scalar(query):
        raise Conflict("Product with this SKU already exists")


@router.get("", response_model=ProductList)
async def list_products(
    params: PageParams = Depends(page_params),
    enterprise_id: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.PRODUCTS, Action.READ)),
):
    query = select(ProductORM).order_by(ProductORM.created_at.desc())
    scope = tenant_scope(principal)
    if scope is not None:
        query = query.where(ProductORM.enterprise_id == scope)
    elif enterprise_id:
        query = query.where(ProductORM.enterprise_id == enterprise_id)
    if params.search:
        query = query.where(
            search_clause(params.search, ProductORM.name, ProductORM.sku, ProductORM.category, ProductORM.description)
        )
    if category:
        query = query.where(ProductORM.category == category)
    if status_filter:
        query = query.where(ProductORM.status == status_filter)

    products, pagination = await paginate(db, query, params)
    return ProductList(products=products, pagination=pagination)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.PRODUCTS, Action.READ)),
):
    return await _load_product(db, principal, product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.PRODUCTS, Action.CREATE)),
):
    await _ensure_sku_free(db, body.sku)
    enterprise_id = await resolve_enterprise_id(db, principal, body.enterprise_id)
    product = ProductORM(**body.model_dump(exclude={"enterprise_id"}), enterprise_id=enterprise_id)
    db.add(product)
    await db.commit()
    logger.info(
        f"Product created: {product.sku}",
        extra={"extra_data": {"enterprise_id": enterprise_id, "created_by": principal.id}},
    )
    return await _load_product(db, principal, product.id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.PRODUCTS, Action.UPDATE)),
):
    product = await _load_product(db, principal, product_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "sku" in changes:
        await _ensure_sku_free(db, changes["sku"], exclude_id=product.id)
    if "enterprise_id" in changes:
        changes["enterprise_id"] = await resolve_enterprise_id(db, principal, changes["enterprise_id"])
    for field, value in changes.items():
        setattr(product, field, value)
    await db.commit()
    return await _load_product(db, principal, product.id)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    principal: UserORM = Depends(require_permission(PermissionModule.PRODUCTS, Action.DELETE)),
):
    product = await _load_product(db, principal, product_id)
    await db.delete(product)
    await db.commit()
    logger.info(f"Product deleted: {product_id}", extra={"extra_data": {"deleted_by": principal.id}})
    return MessageResponse(message="Product deleted successfully")
