"""Read-path narrowing: turn a caller's list filter into a safe query."""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from django.db.models import Q, QuerySet

from access_control.capabilities import Capability, has_capability
from core.pagination import clamp_limit, clamp_page

from .state_machine import ArticleStatus

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = frozenset(
    {
        "id",
        "title",
        "slug",
        "status",
        "published_at",
        "views_count",
        "likes_count",
        "shares_count",
        "is_featured",
        "is_breaking_news",
        "created_at",
        "updated_at",
    }
)
DEFAULT_SORT = "created_at"
DEFAULT_ORDER = "desc"
SORT_ORDERS = frozenset({"asc", "desc"})


@dataclass(frozen=True)
class ArticleListFilter:
    category_id: Optional[int] = None
    status: Optional[str] = None
    author_id: Optional[int] = None
    channel_id: Optional[int] = None
    is_featured: Optional[bool] = None
    is_breaking_news: Optional[bool] = None
    search: Optional[str] = None
    sort: str = DEFAULT_SORT
    order: str = DEFAULT_ORDER
    page: int = 1
    limit: Optional[int] = None


def resolve_ordering(sort: Optional[str], order: Optional[str]) -> str:
    """Map a requested sort key and direction onto an ORM ordering expression.

    Keys outside ``SORTABLE_FIELDS`` fall back to ``created_at``; directions
    other than ``asc`` become ``desc``. The requested literal is never passed
    to the ORM.
    """
    field = sort if sort in SORTABLE_FIELDS else DEFAULT_SORT
    if sort and field != sort:
        logger.info("Ignoring unsupported sort key %r", sort)
    direction = order if order in SORT_ORDERS else DEFAULT_ORDER
    return field if direction == "asc" else f"-{field}"


def narrow_list_filter(actor, requested: ArticleListFilter) -> ArticleListFilter:
    """Clamp a requested filter to what ``actor`` may see.

    Callers without the list-any-status capability (anonymous, readers,
    institutions) only ever see published articles. Editors may filter by any
    status or by none at all. Pagination is clamped into range.
    """
    status = requested.status
    if not has_capability(actor, Capability.LIST_ANY_STATUS):
        status = ArticleStatus.PUBLISHED.value

    ordering = resolve_ordering(requested.sort, requested.order)
    return replace(
        requested,
        status=status,
        sort=ordering.lstrip("-"),
        order="desc" if ordering.startswith("-") else "asc",
        page=clamp_page(requested.page),
        limit=clamp_limit(requested.limit),
    )


def apply_list_filter(queryset: QuerySet, list_filter: ArticleListFilter) -> QuerySet:
    """Apply exact filters, free-text search and ordering; pagination is left to the caller."""
    exact = {
        "category_id": list_filter.category_id,
        "status": list_filter.status,
        "author_id": list_filter.author_id,
        "channel_id": list_filter.channel_id,
        "is_featured": list_filter.is_featured,
        "is_breaking_news": list_filter.is_breaking_news,
    }
    queryset = queryset.filter(**{key: value for key, value in exact.items() if value is not None})

    if list_filter.search:
        term = list_filter.search.strip()
        if term:
            queryset = queryset.filter(
                Q(title__icontains=term) | Q(content__icontains=term) | Q(summary__icontains=term)
            )

    ordering = resolve_ordering(list_filter.sort, list_filter.order)
    return queryset.order_by(ordering, "-id")


__all__ = [
    "SORTABLE_FIELDS",
    "ArticleListFilter",
    "resolve_ordering",
    "narrow_list_filter",
    "apply_list_filter",
]
