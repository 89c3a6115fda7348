"""Article use cases: authorization, validation, workflow and persistence in order.

Each function takes the acting ``Actor`` explicitly. Checks run before any
write, so a denied or invalid request never leaves a partial change behind.
"""

import logging
from dataclasses import replace
from typing import Any, Optional

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, F, Max, Q

from access_control.capabilities import Capability, has_capability
from access_control.policy import (
    Actor,
    can_change_status,
    can_create,
    can_mutate,
    can_view,
    can_view_stats,
    enforce,
    sanitize_writeable_fields,
)
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.pagination import paginate
from core.stats import created_window_counts

from .models import Article
from .state_machine import ArticleStatus, apply_status_transition, initial_transition
from .validation import validate_cross_references
from .visibility import ArticleListFilter, apply_list_filter, narrow_list_filter

logger = logging.getLogger(__name__)

CONTENT_FIELDS = (
    "title",
    "slug",
    "content",
    "summary",
    "image_url",
    "tags",
    "meta_title",
    "meta_description",
    "is_featured",
    "is_breaking_news",
)

ARTICLE_NOT_FOUND = "Article not found."
SLUG_TAKEN = "An article with this slug already exists."


def _articles():
    return Article.objects.select_related("author", "category", "channel")


def _get_article_or_404(article_id: int) -> Article:
    try:
        return _articles().get(pk=article_id)
    except Article.DoesNotExist:
        raise NotFoundError(ARTICLE_NOT_FOUND)


def _stamp_first_publication(article_id: int, published_at) -> None:
    # Conditional write: a concurrent first publication keeps its own stamp.
    Article.objects.filter(pk=article_id, published_at__isnull=True).update(published_at=published_at)


def get_article(actor: Optional[Actor], article_id: int | None = None, slug: str | None = None) -> Article:
    """Fetch one article the actor may see and count the read if it is published."""
    lookup = {"pk": article_id} if article_id is not None else {"slug": slug}
    try:
        article = _articles().get(**lookup)
    except Article.DoesNotExist:
        raise NotFoundError(ARTICLE_NOT_FOUND)

    enforce(can_view(actor, article), ARTICLE_NOT_FOUND)

    if article.is_published:
        Article.objects.filter(pk=article.pk).update(views_count=F("views_count") + 1)
        article.refresh_from_db(fields=["views_count"])
    return article


def list_articles(actor: Optional[Actor], requested: ArticleListFilter) -> tuple[list[Article], dict]:
    effective = narrow_list_filter(actor, requested)
    queryset = apply_list_filter(_articles(), effective)
    return paginate(queryset, effective.page, effective.limit)


def list_own_articles(actor: Actor, requested: ArticleListFilter) -> tuple[list[Article], dict]:
    """The actor's own articles in any status, drafts included."""
    effective = replace(narrow_list_filter(actor, requested), author_id=actor.id, status=requested.status)
    queryset = apply_list_filter(_articles(), effective)
    return paginate(queryset, effective.page, effective.limit)


def create_article(actor: Actor, data: dict[str, Any]) -> Article:
    """Create an article authored by ``actor``.

    Order: role gate, cross references, status derivation and flag
    sanitizing, then a single insert.
    """
    enforce(can_create(actor), "Your role cannot create articles.")
    refs = validate_cross_references(
        actor,
        slug=data.get("slug"),
        category_id=data.get("category_id"),
        channel_id=data.get("channel_id"),
    )

    fields = sanitize_writeable_fields(actor, data, creating=True)
    transition = initial_transition(actor.role, data.get("status"))

    try:
        with transaction.atomic():
            article = Article.objects.create(
                author_id=actor.id,
                category=refs.category,
                channel=refs.channel,
                status=transition.status,
                published_at=transition.published_at,
                **{name: fields[name] for name in CONTENT_FIELDS if name in fields},
            )
    except IntegrityError as exc:
        raise ConflictError(SLUG_TAKEN, field="slug") from exc

    logger.info("Article %s created by user %s with status %s", article.pk, actor.id, article.status)
    return _articles().get(pk=article.pk)


def update_article(actor: Actor, article_id: int, data: dict[str, Any]) -> Article:
    """Apply a partial update.

    Status and editorial flags the actor may not set are dropped while the
    rest of the update still applies.
    """
    if not data:
        raise ValidationError("At least one field must be provided.")

    article = _get_article_or_404(article_id)
    enforce(can_mutate(actor, article), "You can only edit your own articles.")

    slug = data.get("slug")
    category_id = data.get("category_id")
    channel_id = data.get("channel_id")
    refs = validate_cross_references(
        actor,
        slug=slug if slug != article.slug else None,
        category_id=category_id if category_id != article.category_id else None,
        channel_id=channel_id if channel_id != article.channel_id else None,
        exclude_id=article.pk,
        require_category=False,
    )

    patch = sanitize_writeable_fields(actor, data)

    try:
        with transaction.atomic():
            locked = Article.objects.select_for_update().get(pk=article.pk)
            update_fields = ["updated_at"]

            for name in CONTENT_FIELDS:
                if name in patch:
                    setattr(locked, name, patch[name])
                    update_fields.append(name)
            if refs.category is not None:
                locked.category = refs.category
                update_fields.append("category")
            if "channel_id" in data and channel_id != article.channel_id:
                locked.channel = refs.channel
                update_fields.append("channel")

            transition = None
            if "status" in patch:
                transition = apply_status_transition(
                    locked.status,
                    patch["status"],
                    actor.role,
                    prior_published_at=locked.published_at,
                )
                locked.status = transition.status
                update_fields.append("status")

            locked.save(update_fields=update_fields)
            if transition is not None and transition.stamps_publication:
                _stamp_first_publication(locked.pk, transition.published_at)
    except IntegrityError as exc:
        raise ConflictError(SLUG_TAKEN, field="slug") from exc

    logger.info("Article %s updated by user %s: %s", article.pk, actor.id, update_fields)
    return _articles().get(pk=article.pk)


def change_article_status(actor: Actor, article_id: int, status: str) -> Article:
    """Editorial status change; ownership is irrelevant here."""
    enforce(can_change_status(actor), "Only editors can change article status.")

    with transaction.atomic():
        try:
            article = Article.objects.select_for_update().get(pk=article_id)
        except Article.DoesNotExist:
            raise NotFoundError(ARTICLE_NOT_FOUND)

        transition = apply_status_transition(
            article.status,
            status,
            actor.role,
            dedicated=True,
            prior_published_at=article.published_at,
        )
        article.status = transition.status
        article.save(update_fields=["status", "updated_at"])
        if transition.stamps_publication:
            _stamp_first_publication(article.pk, transition.published_at)

    logger.info(
        "Article %s status %s -> %s by user %s",
        article_id,
        transition.previous,
        transition.status,
        actor.id,
    )
    return _articles().get(pk=article_id)


def delete_article(actor: Actor, article_id: int) -> None:
    article = _get_article_or_404(article_id)
    enforce(can_mutate(actor, article, Capability.DELETE_ANY_ARTICLE), "You can only delete your own articles.")
    article.delete()
    logger.info("Article %s deleted by user %s", article_id, actor.id)


def article_stats(actor: Actor) -> dict[str, Any]:
    """Aggregate counts for the dashboard; journalists only see their own articles."""
    enforce(can_view_stats(actor), "Your role cannot view article statistics.")

    queryset = Article.objects.all()
    scope = "all"
    if not has_capability(actor, Capability.VIEW_ALL_ARTICLE_STATS):
        queryset = queryset.filter(author_id=actor.id)
        scope = "own"

    totals = queryset.aggregate(
        total=Count("id"),
        featured=Count("id", filter=Q(is_featured=True)),
        breaking_news=Count("id", filter=Q(is_breaking_news=True)),
        **created_window_counts(),
        average_views=Avg("views_count"),
        max_views=Max("views_count"),
        **{f"status_{value}": Count("id", filter=Q(status=value)) for value in ArticleStatus.values},
    )

    return {
        "scope": scope,
        "total": totals["total"],
        "by_status": {value: totals[f"status_{value}"] for value in ArticleStatus.values},
        "featured": totals["featured"],
        "breaking_news": totals["breaking_news"],
        "created_today": totals["created_today"],
        "created_last_7_days": totals["created_last_7_days"],
        "created_last_30_days": totals["created_last_30_days"],
        "average_views": round(float(totals["average_views"] or 0), 2),
        "max_views": totals["max_views"] or 0,
    }


__all__ = [
    "get_article",
    "list_articles",
    "list_own_articles",
    "create_article",
    "update_article",
    "change_article_status",
    "delete_article",
    "article_stats",
]
