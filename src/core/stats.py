"""Aggregate helpers shared by the dashboard statistics endpoints."""

from datetime import timedelta

from django.db.models import Count, Q
from django.utils import timezone


def created_window_counts(field: str = "created_at", now=None) -> dict[str, Count]:
    """``aggregate()`` keyword arguments counting rows created today, in 7 and in 30 days.

    "Today" starts at local midnight in ``TIME_ZONE``.
    """
    now = now or timezone.now()
    start_of_day = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return {
        "created_today": Count("id", filter=Q(**{f"{field}__gte": start_of_day})),
        "created_last_7_days": Count("id", filter=Q(**{f"{field}__gte": now - timedelta(days=7)})),
        "created_last_30_days": Count("id", filter=Q(**{f"{field}__gte": now - timedelta(days=30)})),
    }


__all__ = ["created_window_counts"]
