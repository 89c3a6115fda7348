"""Comment and bookmark use cases.

Comments follow the visibility of their article; bookmarks are private to
the user who made them.
"""

import logging
from typing import Any, Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q

from access_control.capabilities import Capability, has_capability
from access_control.policy import (
    Actor,
    can_access_bookmark,
    can_mutate_comment,
    can_view,
    can_view_comment,
    enforce,
    is_owner,
)
from articles.models import Article
from articles.state_machine import ArticleStatus
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.pagination import clamp_limit, clamp_page, paginate
from core.stats import created_window_counts

from .models import Bookmark, Comment

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = "Comment not found."
BOOKMARK_NOT_FOUND = "Bookmark not found."
MODERATION_FIELDS = ("is_approved", "is_reported")
TOP_COMMENTERS = 10
RECENT_BOOKMARKS = 5


def _page(queryset, params: dict[str, Any]):
    return paginate(queryset, clamp_page(params.get("page")), clamp_limit(params.get("limit")))


def _get_article(article_id: int) -> Article:
    try:
        return Article.objects.get(pk=article_id)
    except Article.DoesNotExist:
        raise NotFoundError("Article not found.")


def _get_published_article(article_id: int, message: str) -> Article:
    article = _get_article(article_id)
    if not article.is_published:
        raise ValidationError(message, field="article_id")
    return article


def _comments():
    return Comment.objects.select_related("user")


# Comments


def list_article_comments(actor: Optional[Actor], article_id: int, params: dict[str, Any]):
    """Comments of an article the actor may see; moderators also see unapproved ones."""
    article = _get_article(article_id)
    enforce(can_view(actor, article), "Article not found.")
    queryset = _comments().filter(article=article)
    if not has_capability(actor, Capability.MODERATE_COMMENTS):
        queryset = queryset.filter(is_approved=True)
    return _page(queryset, params)


def list_own_comments(actor: Actor, params: dict[str, Any]):
    return _page(_comments().filter(user_id=actor.id), params)


def create_comment(actor: Actor, article_id: int, data: dict[str, Any]) -> Comment:
    article = _get_published_article(article_id, "Cannot comment on unpublished articles.")

    parent_id = data.get("parent_id")
    if parent_id is not None:
        if not Comment.objects.filter(pk=parent_id, article_id=article.pk).exists():
            raise ValidationError("Invalid parent comment.", field="parent_id")

    comment = Comment.objects.create(
        article=article,
        user_id=actor.id,
        parent_id=parent_id,
        content=data["content"],
        is_approved=True,
    )
    logger.info("Comment %s created on article %s by user %s", comment.pk, article.pk, actor.id)
    return _comments().get(pk=comment.pk)


def get_comment(actor: Optional[Actor], comment_id: int) -> Comment:
    """A comment is only as visible as its article, then subject to moderation."""
    try:
        comment = _comments().select_related("article").get(pk=comment_id)
    except Comment.DoesNotExist:
        raise NotFoundError(COMMENT_NOT_FOUND)
    enforce(can_view(actor, comment.article), COMMENT_NOT_FOUND)
    enforce(can_view_comment(actor, comment), COMMENT_NOT_FOUND)
    return comment


def update_comment(actor: Actor, comment_id: int, data: dict[str, Any]) -> Comment:
    """Authors edit content; moderators may also approve or clear reports."""
    comment = get_comment(actor, comment_id)
    enforce(can_mutate_comment(actor, comment), "You can only edit your own comments.")

    allowed = {"content"}
    if has_capability(actor, Capability.MODERATE_COMMENTS):
        allowed.update(MODERATION_FIELDS)
    fields = {name: value for name, value in data.items() if name in allowed}
    if not fields:
        raise ValidationError("No valid fields to update.")

    for name, value in fields.items():
        setattr(comment, name, value)
    comment.save(update_fields=[*fields, "updated_at"])
    return comment


def delete_comment(actor: Actor, comment_id: int) -> None:
    comment = get_comment(actor, comment_id)
    enforce(can_mutate_comment(actor, comment), "You can only delete your own comments.")
    comment.delete()
    logger.info("Comment %s deleted by user %s", comment_id, actor.id)


def report_comment(actor: Actor, comment_id: int) -> Comment:
    comment = get_comment(actor, comment_id)
    if is_owner(actor, comment.user_id):
        raise ValidationError("You cannot report your own comment.")
    comment.is_reported = True
    comment.save(update_fields=["is_reported", "updated_at"])
    logger.info("Comment %s reported by user %s", comment_id, actor.id)
    return comment


def comment_stats() -> dict[str, Any]:
    """Moderation dashboard: totals by state plus the most active commenters."""
    totals = Comment.objects.aggregate(
        total=Count("id"),
        approved=Count("id", filter=Q(is_approved=True)),
        pending=Count("id", filter=Q(is_approved=False)),
        reported=Count("id", filter=Q(is_reported=True)),
        top_level=Count("id", filter=Q(parent__isnull=True)),
        replies=Count("id", filter=Q(parent__isnull=False)),
        **created_window_counts(),
    )
    commenters = (
        Comment.objects.filter(is_approved=True)
        .values("user_id", name=F("user__name"), email=F("user__email"))
        .annotate(comment_count=Count("id"))
        .order_by("-comment_count", "name")[:TOP_COMMENTERS]
    )
    return {**totals, "active_commenters": list(commenters)}


# Bookmarks


def _bookmarks():
    return Bookmark.objects.select_related("article", "article__author", "article__category", "article__channel")


def list_bookmarks(actor: Actor, params: dict[str, Any]):
    return _page(_bookmarks().filter(user_id=actor.id), params)


def create_bookmark(actor: Actor, article_id: int) -> Bookmark:
    article = _get_published_article(article_id, "Cannot bookmark unpublished articles.")
    if Bookmark.objects.filter(user_id=actor.id, article=article).exists():
        raise ConflictError("Article is already bookmarked.", field="article_id")
    try:
        with transaction.atomic():
            bookmark = Bookmark.objects.create(user_id=actor.id, article=article)
    except IntegrityError as exc:
        raise ConflictError("Article is already bookmarked.", field="article_id") from exc
    return _bookmarks().get(pk=bookmark.pk)


def get_bookmark(actor: Actor, bookmark_id: int) -> Bookmark:
    try:
        bookmark = _bookmarks().get(pk=bookmark_id)
    except Bookmark.DoesNotExist:
        raise NotFoundError(BOOKMARK_NOT_FOUND)
    enforce(can_access_bookmark(actor, bookmark), BOOKMARK_NOT_FOUND)
    return bookmark


def delete_bookmark(actor: Actor, bookmark_id: int) -> None:
    get_bookmark(actor, bookmark_id).delete()


def is_bookmarked(actor: Actor, article_id: int) -> bool:
    return Bookmark.objects.filter(user_id=actor.id, article_id=article_id).exists()


def delete_bookmark_for_article(actor: Actor, article_id: int) -> None:
    deleted, _ = Bookmark.objects.filter(user_id=actor.id, article_id=article_id).delete()
    if not deleted:
        raise NotFoundError(BOOKMARK_NOT_FOUND)


def delete_bookmarks(actor: Actor, bookmark_ids: list[int]) -> int:
    """Delete several of the caller's bookmarks at once; all or nothing.

    An id that is missing or belongs to someone else fails the whole request
    with 404, so other users' bookmarks stay indistinguishable from gaps.
    """
    ids = set(bookmark_ids)
    if not ids:
        raise ValidationError("Provide at least one bookmark id.", field="bookmark_ids")
    with transaction.atomic():
        owned = Bookmark.objects.select_for_update().filter(user_id=actor.id, pk__in=ids)
        if len(owned) != len(ids):
            raise NotFoundError(BOOKMARK_NOT_FOUND, field="bookmark_ids")
        deleted, _ = Bookmark.objects.filter(user_id=actor.id, pk__in=ids).delete()
    logger.info("User %s deleted %s bookmarks", actor.id, deleted)
    return deleted


def recent_bookmarks(actor: Actor, limit: Any = None) -> list[Bookmark]:
    limit = clamp_limit(limit, default=RECENT_BOOKMARKS)
    return list(_bookmarks().filter(user_id=actor.id).order_by("-created_at", "-id")[:limit])


def bookmark_stats(actor: Actor) -> dict[str, int]:
    return Bookmark.objects.filter(user_id=actor.id).aggregate(total=Count("id"), **created_window_counts())


def bookmarks_by_category(actor: Actor) -> list[dict[str, Any]]:
    """Bookmarked published articles grouped by category, most bookmarked first."""
    rows = (
        Bookmark.objects.filter(user_id=actor.id, article__status=ArticleStatus.PUBLISHED)
        .values(
            category_id=F("article__category_id"),
            name=F("article__category__name"),
            slug=F("article__category__slug"),
        )
        .annotate(bookmark_count=Count("id"))
        .order_by("-bookmark_count", "name")
    )
    return list(rows)


__all__ = [
    "list_article_comments",
    "list_own_comments",
    "create_comment",
    "get_comment",
    "update_comment",
    "delete_comment",
    "report_comment",
    "comment_stats",
    "list_bookmarks",
    "create_bookmark",
    "get_bookmark",
    "delete_bookmark",
    "is_bookmarked",
    "delete_bookmark_for_article",
    "delete_bookmarks",
    "recent_bookmarks",
    "bookmark_stats",
    "bookmarks_by_category",
]
