"""Category and channel use cases."""

import logging
from typing import Any, Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, ProtectedError, Q, QuerySet

from access_control.policy import (
    Actor,
    can_create_channel,
    can_manage_channel,
    can_verify_channel,
    enforce,
)
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.pagination import clamp_limit, clamp_page, paginate
from core.stats import created_window_counts

from .models import Category, Channel

logger = logging.getLogger(__name__)

TOP_LIMIT = 10


def _ensure_unique_slug(model, slug: Optional[str], exclude_id: Optional[int] = None) -> None:
    if slug is None:
        return
    clashes = model.objects.filter(slug=slug)
    if exclude_id is not None:
        clashes = clashes.exclude(pk=exclude_id)
    if clashes.exists():
        raise ConflictError(f"A {model._meta.verbose_name} with this slug already exists.", field="slug")


def _save(instance, update_fields=None):
    try:
        with transaction.atomic():
            instance.save(update_fields=update_fields)
    except IntegrityError as exc:
        raise ConflictError(
            f"A {instance._meta.verbose_name} with this slug already exists.", field="slug"
        ) from exc
    return instance


def _apply(instance, data: dict[str, Any]) -> list[str]:
    for name, value in data.items():
        setattr(instance, name, value)
    return [*data.keys(), "updated_at"]


def _search(queryset: QuerySet, params: dict[str, Any]) -> QuerySet:
    term = (params.get("search") or "").strip()
    if term:
        queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
    for flag in ("is_active", "is_verified"):
        if params.get(flag) is not None and hasattr(queryset.model, flag):
            queryset = queryset.filter(**{flag: params[flag]})
    return queryset


def _delete_unused(instance, label: str) -> None:
    try:
        instance.delete()
    except ProtectedError as exc:
        raise ValidationError(f"Cannot delete {label} that is being used by news articles.") from exc


# Categories


def list_categories(params: dict[str, Any]) -> tuple[list[Category], dict]:
    queryset = _search(Category.objects.all(), params)
    return paginate(queryset, clamp_page(params.get("page")), clamp_limit(params.get("limit")))


def get_category(category_id: int | None = None, slug: str | None = None) -> Category:
    lookup = {"pk": category_id} if category_id is not None else {"slug": slug}
    try:
        return Category.objects.get(**lookup)
    except Category.DoesNotExist:
        raise NotFoundError("Category not found.")


def create_category(data: dict[str, Any]) -> Category:
    _ensure_unique_slug(Category, data.get("slug"))
    category = _save(Category(**data))
    logger.info("Category %s created", category.pk)
    return category


def update_category(category_id: int, data: dict[str, Any]) -> Category:
    category = get_category(category_id)
    if not data:
        raise ValidationError("At least one field must be provided.")
    _ensure_unique_slug(Category, data.get("slug"), exclude_id=category.pk)
    return _save(category, update_fields=_apply(category, data))


def delete_category(category_id: int) -> None:
    category = get_category(category_id)
    _delete_unused(category, "category")
    logger.info("Category %s deleted", category_id)


def list_active_categories() -> list[Category]:
    return list(Category.objects.filter(is_active=True).order_by("name"))


def category_stats() -> dict[str, Any]:
    """Totals plus the active categories carrying the most articles."""
    totals = Category.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        inactive=Count("id", filter=Q(is_active=False)),
        **created_window_counts(),
    )
    top = (
        Category.objects.filter(is_active=True)
        .annotate(article_count=Count("articles"))
        .order_by("-article_count", "name")
        .values("id", "name", "slug", "article_count")[:TOP_LIMIT]
    )
    return {**totals, "top_categories": list(top)}


# Channels


def list_channels(params: dict[str, Any], owner: Optional[Actor] = None) -> tuple[list[Channel], dict]:
    queryset = Channel.objects.select_related("owner")
    if owner is not None:
        queryset = queryset.filter(owner_id=owner.id)
    queryset = _search(queryset, params)
    return paginate(queryset, clamp_page(params.get("page")), clamp_limit(params.get("limit")))


def get_channel(channel_id: int | None = None, slug: str | None = None) -> Channel:
    lookup = {"pk": channel_id} if channel_id is not None else {"slug": slug}
    try:
        return Channel.objects.select_related("owner").get(**lookup)
    except Channel.DoesNotExist:
        raise NotFoundError("Channel not found.")


def create_channel(actor: Actor, data: dict[str, Any]) -> Channel:
    """New channels belong to their creator and start unverified."""
    enforce(can_create_channel(actor), "Only institutions and admins can create channels.")
    _ensure_unique_slug(Channel, data.get("slug"))
    fields = {**data, "is_verified": False}
    channel = _save(Channel(owner_id=actor.id, **fields))
    logger.info("Channel %s created by user %s", channel.pk, actor.id)
    return get_channel(channel.pk)


def update_channel(actor: Actor, channel_id: int, data: dict[str, Any]) -> Channel:
    """Owner or admin update; verification changes from anyone else are dropped."""
    channel = get_channel(channel_id)
    enforce(can_manage_channel(actor, channel), "You can only manage your own channels.")
    fields = dict(data)
    if "is_verified" in fields and not can_verify_channel(actor).allowed:
        logger.info("Dropping is_verified from channel update by user %s", actor.id)
        fields.pop("is_verified")
    if not fields:
        raise ValidationError("No valid fields to update.")
    _ensure_unique_slug(Channel, fields.get("slug"), exclude_id=channel.pk)
    _save(channel, update_fields=_apply(channel, fields))
    return get_channel(channel.pk)


def delete_channel(actor: Actor, channel_id: int) -> None:
    channel = get_channel(channel_id)
    enforce(can_manage_channel(actor, channel), "You can only manage your own channels.")
    _delete_unused(channel, "channel")
    logger.info("Channel %s deleted by user %s", channel_id, actor.id)


def list_verified_channels() -> list[Channel]:
    return list(Channel.objects.select_related("owner").filter(is_verified=True, is_active=True).order_by("name"))


def channel_stats() -> dict[str, Any]:
    """Totals plus the verified, active channels carrying the most articles."""
    totals = Channel.objects.aggregate(
        total=Count("id"),
        verified=Count("id", filter=Q(is_verified=True)),
        unverified=Count("id", filter=Q(is_verified=False)),
        active=Count("id", filter=Q(is_active=True)),
        inactive=Count("id", filter=Q(is_active=False)),
        **created_window_counts(),
    )
    top = (
        Channel.objects.filter(is_verified=True, is_active=True)
        .annotate(article_count=Count("articles"))
        .order_by("-article_count", "name")
        .values("id", "name", "slug", "article_count")[:TOP_LIMIT]
    )
    return {**totals, "top_channels": list(top)}


__all__ = [
    "list_categories",
    "get_category",
    "create_category",
    "update_category",
    "delete_category",
    "list_active_categories",
    "category_stats",
    "list_channels",
    "get_channel",
    "create_channel",
    "update_channel",
    "delete_channel",
    "list_verified_channels",
    "channel_stats",
]
