"""Page/limit clamping and the pagination meta block used by list endpoints."""

import math
from typing import Any

from django.conf import settings

# Keeps page * limit inside a signed 64-bit OFFSET for every allowed limit.
MAX_PAGE = 2**31 - 1


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def clamp_page(page: Any) -> int:
    """Pages run from 1 to ``MAX_PAGE``; unparsable values become 1."""
    return min(max(1, _as_int(page, 1)), MAX_PAGE)


def clamp_limit(limit: Any, default: int | None = None, maximum: int | None = None) -> int:
    """Clamp a requested page size into ``[1, maximum]``.

    Out-of-range values are pulled back into range instead of being rejected.
    """
    default = default or settings.ARTICLE_PAGE_SIZE
    maximum = maximum or settings.ARTICLE_MAX_PAGE_SIZE
    if limit is None:
        return min(default, maximum)
    return min(max(1, _as_int(limit, default)), maximum)


def pagination_meta(page: int, limit: int, total_items: int) -> dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total_items": total_items,
        "total_pages": math.ceil(total_items / limit) if limit else 0,
    }


def paginate(queryset, page: int, limit: int) -> tuple[list, dict[str, int]]:
    """Slice ``queryset`` for the given page and describe the result."""
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit]) if offset < total else []
    return items, pagination_meta(page, limit, total)


__all__ = ["MAX_PAGE", "clamp_page", "clamp_limit", "pagination_meta", "paginate"]
