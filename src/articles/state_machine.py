"""Publication workflow for articles.

Privileged roles may move an article to any status. The machine's work is
deriving a role-appropriate status on create, narrowing status changes
requested through the general update path, and stamping ``published_at`` the
first time an article goes live. It never raises: requests it does not honour
are narrowed or dropped.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.db import models
from django.utils import timezone

from access_control.capabilities import Capability, role_has_capability
from access_control.roles import Role

logger = logging.getLogger(__name__)


class ArticleStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    REVIEW = "review", "Review"
    PUBLISHED = "published", "Published"
    REJECTED = "rejected", "Rejected"
    ARCHIVED = "archived", "Archived"


# Statuses a non-privileged role may set on an article it owns.
SELF_SERVICE_STATUSES: dict[str, frozenset[str]] = {
    Role.INSTITUTION.value: frozenset({ArticleStatus.REVIEW.value}),
    Role.READER.value: frozenset({ArticleStatus.DRAFT.value}),
}


@dataclass(frozen=True)
class StatusTransition:
    """Outcome of a status change: the status to persist and its publish stamp."""

    previous: Optional[str]
    status: str
    published_at: Optional[datetime]

    @property
    def changed(self) -> bool:
        return self.previous != self.status

    @property
    def stamps_publication(self) -> bool:
        """True when this transition is the article's first publication."""
        return self.status == ArticleStatus.PUBLISHED and self.published_at is not None


def derive_initial_status(role: str, requested: Optional[str] = None) -> str:
    """Status a new article is stored with when ``role`` asks for ``requested``."""
    if role == Role.READER:
        return ArticleStatus.DRAFT.value
    status = requested or ArticleStatus.DRAFT.value
    if status == ArticleStatus.PUBLISHED and role == Role.INSTITUTION:
        # Institution content goes through editorial review first.
        return ArticleStatus.REVIEW.value
    return str(status)


def narrow_update_status(role: str, requested: Optional[str]) -> Optional[str]:
    """Return the status ``role`` may set through an update, or None to drop it."""
    if requested is None:
        return None
    if role_has_capability(role, Capability.SET_ANY_STATUS):
        return str(requested)
    allowed = SELF_SERVICE_STATUSES.get(str(role), frozenset())
    if str(requested) in allowed:
        return str(requested)
    logger.info("Dropping status change to %r requested by role %r", requested, role)
    return None


def _should_stamp(prior_status: Optional[str], status: str, prior_published_at: Optional[datetime]) -> bool:
    return (
        status == ArticleStatus.PUBLISHED
        and prior_status != ArticleStatus.PUBLISHED
        and prior_published_at is None
    )


def apply_status_transition(
    prior_status: Optional[str],
    requested_status: Optional[str],
    role: str,
    dedicated: bool = False,
    prior_published_at: Optional[datetime] = None,
) -> StatusTransition:
    """Compute the status to persist for a requested change.

    ``dedicated`` marks the editorial status endpoint, whose caller has
    already been authorized, so the requested status applies as-is. Through
    the general update path the request is narrowed by role; a dropped
    request leaves the prior status in place.

    ``published_at`` is only returned for the first publication. Redundant
    publish requests and re-publication after archiving keep the original
    stamp, which the caller never overwrites.
    """
    if dedicated:
        status = requested_status
    else:
        status = narrow_update_status(role, requested_status)

    if status is None:
        return StatusTransition(previous=prior_status, status=prior_status, published_at=None)

    published_at = timezone.now() if _should_stamp(prior_status, status, prior_published_at) else None
    return StatusTransition(previous=prior_status, status=status, published_at=published_at)


def initial_transition(role: str, requested: Optional[str] = None) -> StatusTransition:
    """Transition for a brand new article, stamping it when it starts out published."""
    status = derive_initial_status(role, requested)
    published_at = timezone.now() if _should_stamp(None, status, None) else None
    return StatusTransition(previous=None, status=status, published_at=published_at)


__all__ = [
    "ArticleStatus",
    "SELF_SERVICE_STATUSES",
    "StatusTransition",
    "derive_initial_status",
    "narrow_update_status",
    "apply_status_transition",
    "initial_transition",
]
