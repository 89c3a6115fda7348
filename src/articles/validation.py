"""Cross-entity checks run before an article is written."""

from dataclasses import dataclass
from typing import Optional

from access_control.policy import can_use_channel, enforce
from catalog.models import Category, Channel
from core.exceptions import ConflictError, ValidationError

from .models import Article


@dataclass(frozen=True)
class CrossReferences:
    """Rows resolved while validating, so the caller does not fetch them twice."""

    category: Optional[Category] = None
    channel: Optional[Channel] = None


def validate_cross_references(
    actor,
    *,
    slug: Optional[str] = None,
    category_id: Optional[int] = None,
    channel_id: Optional[int] = None,
    exclude_id: Optional[int] = None,
    require_category: bool = True,
) -> CrossReferences:
    """Check slug uniqueness, then the category, then the channel.

    The first failure raises with the offending field; nothing has been
    written at that point. ``None`` values are skipped, except a missing
    category when ``require_category`` is set (article creation).
    """
    if slug is not None:
        clashes = Article.objects.filter(slug=slug)
        if exclude_id is not None:
            clashes = clashes.exclude(pk=exclude_id)
        if clashes.exists():
            raise ConflictError("An article with this slug already exists.", field="slug")

    category = None
    if category_id is not None:
        category = Category.objects.filter(pk=category_id).first()
        if category is None:
            raise ValidationError("Category does not exist.", field="category_id")
    elif require_category:
        raise ValidationError("Category is required.", field="category_id")

    channel = None
    if channel_id is not None:
        channel = Channel.objects.filter(pk=channel_id).first()
        if channel is None:
            raise ValidationError("Channel does not exist.", field="channel_id")
        enforce(
            can_use_channel(actor, channel),
            "You can only publish to channels you own.",
            field="channel_id",
        )

    return CrossReferences(category=category, channel=channel)


__all__ = ["CrossReferences", "validate_cross_references"]
