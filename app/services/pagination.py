"""Page/limit handling shared by the list endpoints."""

import math

from app.schemas.common import Pagination

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def clamp(page: int, limit: int) -> tuple[int, int]:
    """Force page >= 1 and 1 <= limit <= MAX_PAGE_SIZE."""
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)


def build(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if total else 0,
    )
