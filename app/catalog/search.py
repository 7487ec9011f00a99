"""Keyword search and pagination.

perform_search is the single place where keyword matching is assembled:
repositories hand it a store, an exact-match filter and the fields a
keyword should be matched against, and get back one page plus the total.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from app.catalog.store import Criteria, EntityStore
from app.domain.exceptions import BadRequestError
from app.infrastructure.config import settings


@dataclass
class Pagination:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        limit: Items per page.
    """

    page: int = 1
    limit: int = field(default_factory=lambda: settings.default_page_limit)

    def __post_init__(self) -> None:
        if self.page < 1:
            raise BadRequestError("page must be >= 1", details={"page": self.page})
        if not 1 <= self.limit <= settings.max_page_limit:
            raise BadRequestError(
                f"limit must be between 1 and {settings.max_page_limit}",
                details={"limit": self.limit},
            )

    @property
    def skip(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.limit


@dataclass
class PageInfo:
    """Pagination envelope returned with a page of results."""

    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        """Calculate total pages."""
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


@dataclass
class SearchResult:
    """Result of a repository search.

    Attributes:
        data: Formatted records.
        pagination: Envelope, or None when the caller asked for everything.
    """

    data: list[dict[str, Any]]
    pagination: PageInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "pagination": self.pagination.to_dict() if self.pagination else None,
        }


@dataclass
class SearchHits:
    """Raw records matched by perform_search."""

    items: list[dict[str, Any]]
    total: int


async def perform_search(
    store: EntityStore,
    *,
    keyword: str | None = None,
    filters: dict[str, Any] | None = None,
    search_fields: Sequence[str] = (),
    sort_by: str | None = None,
    sort_order: str = "asc",
    skip: int = 0,
    limit: int | None = None,
) -> SearchHits:
    """Run a keyword search against a store.

    Args:
        store: Store to query.
        keyword: Optional case-insensitive substring.
        filters: Exact-match conditions ANDed with the keyword match.
        search_fields: Dotted field paths the keyword is ORed across.
        sort_by: Sort field.
        sort_order: Sort order (asc/desc).
        skip: Number of records to skip.
        limit: Maximum records to return (None for all).

    Returns:
        Matching records for the requested window and the total match count.
    """
    criteria = Criteria(
        equals=dict(filters or {}),
        keyword=str(keyword).strip() if keyword is not None else None,
        keyword_fields=list(search_fields),
    )
    total = await store.count(criteria)
    items = await store.find(
        criteria,
        sort_by=sort_by,
        sort_order=sort_order,
        skip=skip,
        limit=limit,
    )
    return SearchHits(items=items, total=total)
