"""Offset pagination shared by all list endpoints."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    """Requested window: ``page`` is 1-based."""

    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    """One page of results plus totals."""

    items: Sequence[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


async def paginate(
    session: AsyncSession,
    query: Select[Any],
    params: PageParams,
    *order_by: Any,
) -> Page[Any]:
    """Run ``query`` for one page and count all matching rows."""
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await session.scalar(count_query) or 0

    if order_by:
        query = query.order_by(*order_by)
    query = query.offset(params.offset).limit(params.limit)

    result = await session.execute(query)
    return Page(items=result.scalars().all(), page=params.page, limit=params.limit, total=total)
