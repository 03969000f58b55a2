"""List endpoint helpers: page/limit/search query parameters and counting."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Query
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.schemas.common import Pagination


@dataclass
class PageParams:
    page: int
    limit: int
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: Optional[str] = Query(default=None, max_length=100),
) -> PageParams:
    return PageParams(page=page, limit=limit, search=search.strip() if search else None)


def search_clause(term: str, *columns):
    """Case-insensitive substring match on any of ``columns``."""
    pattern = f"%{term}%"
    return or_(*(column.ilike(pattern) for column in columns))


async def paginate(db: AsyncSession, query: Select, params: PageParams) -> tuple[list, Pagination]:
    total = await db.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
    result = await db.execute(query.limit(params.limit).offset(params.offset))
    rows = list(result.scalars().all())
    return rows, Pagination.build(params.page, params.limit, total or 0)
