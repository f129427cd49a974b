"""Generic pagination utilities for SQLAlchemy async queries."""


import math
from typing import Any, Generic, Literal, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.common.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tripgo.common.filters import sortable_column

T = TypeVar("T")


# ── FastAPI dependency ──────────────────────────────────────────────

class PaginationParams:
    """Inject via ``Depends(PaginationParams)`` on any list endpoint."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
        limit: int = Query(
            default=DEFAULT_PAGE_SIZE,
            ge=1,
            le=MAX_PAGE_SIZE,
            description=f"Items per page (max {MAX_PAGE_SIZE})",
        ),
        sort_by: Optional[str] = Query(default=None, description="Column to sort on"),
        sort_order: Literal["asc", "desc"] = Query(default="desc"),
    ) -> None:
        self.page = page
        self.limit = limit
        self.sort_by = sort_by
        self.sort_order = sort_order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# ── Pydantic response models ───────────────────────────────────────

class PaginationMeta(BaseModel):
    """Metadata block embedded in every paginated response."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(page=page, limit=limit, total=total, pages=total_pages(total, limit))


class PaginatedResponse(BaseModel, Generic[T]):
    """Rows of one page plus its ``PaginationMeta``."""

    data: Sequence[T]
    meta: PaginationMeta


def total_pages(total: int, limit: int) -> int:
    """``ceil(total / limit)``; zero when there is nothing to page through."""
    if total <= 0:
        return 0
    return math.ceil(total / limit)


# ── SQLAlchemy helper ───────────────────────────────────────────────

async def paginate(
    session: AsyncSession,
    query: Select,
    params: PaginationParams,
    *,
    model: Any = None,
) -> PaginatedResponse:
    """
    Execute *query* with LIMIT/OFFSET derived from *params* and return
    a ``PaginatedResponse`` with data + meta.

    ``sort_by`` is only honoured when it names a sortable column of *model*;
    otherwise the query keeps the ordering the caller gave it.
    """
    # ── sorting ─────────────────────────────────────────────────────
    sort_col = sortable_column(model, params.sort_by) if model is not None else None
    if sort_col is not None:
        query = query.order_by(None).order_by(
            sort_col.asc() if params.sort_order == "asc" else sort_col.desc()
        )

    # ── total count ─────────────────────────────────────────────────
    count_q = select(func.count()).select_from(query.order_by(None).subquery())
    total: int = (await session.execute(count_q)).scalar_one()

    # ── paginated rows ──────────────────────────────────────────────
    rows = (
        await session.execute(query.offset(params.offset).limit(params.limit))
    ).scalars().all()

    return PaginatedResponse(
        data=rows,
        meta=PaginationMeta.build(params.page, params.limit, total),
    )
