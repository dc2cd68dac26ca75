"""Pagination - page/limit clamping and the pagination result envelope.

Invariants:
    - page >= 1 and 1 <= limit <= 100 for any input, including junk strings
    - offset never exceeds a signed 64-bit integer (page is capped accordingly)
    - offset = (page - 1) * limit
    - total_pages = ceil(total / limit); has_next = page < total_pages; has_prev = page > 1
    - Pagination is derived from (page, limit, total) on every call, never cached

Design Decisions:
    - Falsy page/limit (0, "", None) fall back to the defaults before clamping,
      so limit=0 yields the default page size rather than 1
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_OFFSET = 2**63 - 1


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def resolve_page_window(params: Mapping[str, Any]) -> tuple[int, int, int]:
    """Return (page, limit, offset) from raw parameters."""
    limit = min(MAX_LIMIT, max(1, _as_int(params.get("limit")) or DEFAULT_LIMIT))
    page = max(1, _as_int(params.get("page")) or DEFAULT_PAGE)
    page = min(page, MAX_OFFSET // limit + 1)
    return page, limit, (page - 1) * limit


def wants_deleted(params: Mapping[str, Any]) -> bool:
    """`deleted` counts only when it is literally true."""
    value = params.get("deleted")
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_total(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    def to_dict(self) -> dict:
        """Wire shape (camelCase keys)."""
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }
