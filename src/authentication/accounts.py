"""Admin-side account management: listing, creating, editing and soft-deleting users."""

import logging
from typing import Any, Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from access_control.roles import Role
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.pagination import clamp_limit, clamp_page, paginate
from core.stats import created_window_counts

from .services import bump_token_version

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found."
EMAIL_TAKEN = "Email already in use."


def _ensure_email_free(email: str, exclude_id: Optional[int] = None) -> None:
    clashes = get_user_model().objects.filter(email__iexact=email)
    if exclude_id is not None:
        clashes = clashes.exclude(pk=exclude_id)
    if clashes.exists():
        raise ConflictError(EMAIL_TAKEN, field="email")


def list_users(params: dict[str, Any]):
    """Every account, newest first, filtered by name/email search, role and status."""
    queryset = get_user_model().objects.order_by("-date_joined", "-id")
    search = params.get("search")
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(email__icontains=search))
    if params.get("role"):
        queryset = queryset.filter(role=params["role"])
    if params.get("is_active") is not None:
        queryset = queryset.filter(is_active=params["is_active"])
    return paginate(queryset, clamp_page(params.get("page")), clamp_limit(params.get("limit")))


def get_user(user_id: int):
    User = get_user_model()
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFoundError(USER_NOT_FOUND)


def create_account(data: dict[str, Any]):
    """Admin-side account creation; any role, including ``admin``, may be assigned."""
    _ensure_email_free(data["email"])
    try:
        with transaction.atomic():
            user = get_user_model().objects.create_user(**data)
    except IntegrityError as exc:
        raise ConflictError(EMAIL_TAKEN, field="email") from exc
    logger.info("User %s created with role %s", user.pk, user.role)
    return user


def update_account(actor, user_id: int, data: dict[str, Any]):
    """Change name, email, role or status of an account.

    A role change or deactivation bumps ``token_version`` so tokens carrying
    the old role stop working. Admins cannot demote or deactivate themselves.
    """
    if not data:
        raise ValidationError("No valid fields to update.")
    user = get_user(user_id)

    if "email" in data:
        _ensure_email_free(data["email"], exclude_id=user.pk)
    role_changed = "role" in data and data["role"] != user.role
    deactivating = data.get("is_active") is False and user.is_active
    if user.pk == actor.id and (role_changed or deactivating):
        raise ValidationError("You cannot change the role or status of your own account.")

    for name, value in data.items():
        setattr(user, name, value)
    fields = [*data, "updated_at"]
    try:
        with transaction.atomic():
            if role_changed or deactivating:
                bump_token_version(user, *fields)
            else:
                user.save(update_fields=fields)
    except IntegrityError as exc:
        raise ConflictError(EMAIL_TAKEN, field="email") from exc
    logger.info("User %s updated by admin %s: %s", user.pk, actor.id, sorted(data))
    return user


def deactivate_user(actor, user_id: int) -> None:
    """Soft delete another account and invalidate all of its tokens."""
    if user_id == actor.id:
        raise ValidationError("You cannot delete your own account.")
    user = get_user(user_id)
    user.is_active = False
    bump_token_version(user, "is_active", "updated_at")
    logger.info("User %s deactivated by admin %s", user.pk, actor.id)


def user_stats() -> dict[str, Any]:
    totals = get_user_model().objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        inactive=Count("id", filter=Q(is_active=False)),
        **created_window_counts("date_joined"),
        **{f"role_{value}": Count("id", filter=Q(role=value)) for value in Role.values},
    )
    return {
        "total": totals["total"],
        "by_role": {value: totals[f"role_{value}"] for value in Role.values},
        "active": totals["active"],
        "inactive": totals["inactive"],
        "joined_today": totals["created_today"],
        "joined_last_7_days": totals["created_last_7_days"],
        "joined_last_30_days": totals["created_last_30_days"],
    }


__all__ = [
    "list_users",
    "get_user",
    "create_account",
    "update_account",
    "deactivate_user",
    "user_stats",
]
