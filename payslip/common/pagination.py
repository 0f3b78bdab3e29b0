"""Pagination utilities: page/limit arithmetic and SQLAlchemy async helper.

Every list operation in the service goes through ``page_window`` so that a
page known to be empty is answered without touching the store.
"""


import math
from dataclasses import dataclass
from typing import Any

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payslip.common.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT


# ── Page arithmetic ─────────────────────────────────────────────────

@dataclass(frozen=True)
class PageWindow:
    offset: int
    total_pages: int
    is_empty: bool


def normalize_page_params(page: int, limit: int) -> tuple[int, int]:
    """Clamp page to >= 1 and fall back to the default limit when < 1."""
    if page < 1:
        page = 1
    if limit < 1:
        limit = DEFAULT_PAGE_LIMIT
    return page, limit


def page_window(total: int, page: int, limit: int) -> PageWindow:
    """Translate (total, page, limit) into an offset and total page count.

    ``page`` and ``limit`` must already be >= 1 (see ``normalize_page_params``).
    A page past the end is reported as empty rather than as an error.
    """
    total_pages = math.ceil(total / limit)
    offset = (page - 1) * limit
    is_empty = page > total_pages or offset >= total
    return PageWindow(offset=offset, total_pages=total_pages, is_empty=is_empty)


# ── FastAPI dependency ──────────────────────────────────────────────

class PaginationParams:
    """Inject via ``Depends(PaginationParams)`` on any list endpoint."""

    def __init__(
        self,
        page: int = Query(default=1, description="Page number (1-indexed)"),
        limit: int = Query(
            default=DEFAULT_PAGE_LIMIT,
            le=MAX_PAGE_LIMIT,
            description=f"Items per page (max {MAX_PAGE_LIMIT})",
        ),
    ) -> None:
        self.page, self.limit = normalize_page_params(page, limit)


# ── Pydantic response models ───────────────────────────────────────

class PaginationMeta(BaseModel):
    """Metadata block embedded in every paginated response."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        total_pages = math.ceil(total / limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


# ── SQLAlchemy helper ───────────────────────────────────────────────

async def paginate(
    session: AsyncSession,
    query: Select,
    page: int,
    limit: int,
) -> tuple[list[Any], PaginationMeta]:
    """
    Count the rows of *query*, then fetch the requested page unless it is
    known to be empty. Returns ``(rows, meta)``; rows are whatever the
    query selects (``Row`` objects for multi-column selects).
    """
    count_q = select(func.count()).select_from(query.order_by(None).subquery())
    total: int = (await session.execute(count_q)).scalar_one()

    meta = PaginationMeta.build(total, page, limit)
    window = page_window(total, page, limit)
    if window.is_empty:
        return [], meta

    result = await session.execute(query.offset(window.offset).limit(limit))
    if len(query.column_descriptions) == 1:
        return list(result.scalars().all()), meta
    return list(result.all()), meta
