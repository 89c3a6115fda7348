"""Authorization decisions for articles, channels, comments and bookmarks.

Rules are plain functions over an explicit ``Actor`` and the resource they
concern; they read nothing from the request. Each returns a ``Decision`` that
``enforce`` turns into the matching API error.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from articles.state_machine import ArticleStatus, derive_initial_status, narrow_update_status
from core.exceptions import ForbiddenError, NotFoundError

from .capabilities import Capability, has_capability

logger = logging.getLogger(__name__)

EDITORIAL_FLAGS = ("is_featured", "is_breaking_news")


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, reduced to what authorization needs."""

    id: int
    role: str

    def __post_init__(self) -> None:
        # Role choices and plain strings must compare and hash alike.
        object.__setattr__(self, "role", str(self.role))

    @classmethod
    def from_user(cls, user) -> Optional["Actor"]:
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return cls(id=user.id, role=user.role)


def actor_from_request(request) -> Optional[Actor]:
    return Actor.from_user(getattr(request, "user", None))


class Decision(enum.Enum):
    ALLOW = "allow"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


def enforce(decision: Decision, message: str | None = None, field: str | None = None) -> None:
    """Raise the error matching a denial; return quietly on ALLOW."""
    if decision is Decision.ALLOW:
        return
    if decision is Decision.NOT_FOUND:
        raise NotFoundError(message or "Not found.", field=field)
    raise ForbiddenError(message, field=field)


def _decide(allowed: bool, denial: Decision = Decision.FORBIDDEN) -> Decision:
    return Decision.ALLOW if allowed else denial


def is_owner(actor: Optional[Actor], owner_id: Any) -> bool:
    return actor is not None and owner_id is not None and actor.id == owner_id


def is_owner_or_override(
    actor: Optional[Actor],
    resource: Any,
    owner_field: str,
    override: Capability | None = None,
) -> bool:
    """True if ``actor`` owns ``resource`` through ``owner_field`` or holds ``override``.

    This is the single ownership predicate shared by articles (``author_id``),
    channels (``owner_id``), comments and bookmarks (``user_id``).
    """
    if actor is None:
        return False
    if override is not None and has_capability(actor, override):
        return True
    return is_owner(actor, getattr(resource, owner_field, None))


# Articles


def can_view(actor: Optional[Actor], article) -> Decision:
    """Published articles are public; anything else exists only for its author and editors.

    Hidden articles report NOT_FOUND so drafts cannot be enumerated.
    """
    if article.status == ArticleStatus.PUBLISHED:
        return Decision.ALLOW
    return _decide(
        is_owner_or_override(actor, article, "author_id", Capability.VIEW_UNPUBLISHED),
        Decision.NOT_FOUND,
    )


def can_create(actor: Optional[Actor]) -> Decision:
    """Role gate only; the chosen channel is checked by ``can_use_channel``."""
    return _decide(has_capability(actor, Capability.CREATE_ARTICLE))


def can_mutate(
    actor: Optional[Actor],
    article,
    override: Capability = Capability.EDIT_ANY_ARTICLE,
) -> Decision:
    """Update and delete need authorship or the matching editorial capability."""
    return _decide(is_owner_or_override(actor, article, "author_id", override))


def can_change_status(actor: Optional[Actor]) -> Decision:
    """The dedicated status endpoint ignores ownership entirely."""
    return _decide(has_capability(actor, Capability.CHANGE_ARTICLE_STATUS))


def can_view_stats(actor: Optional[Actor]) -> Decision:
    return _decide(has_capability(actor, Capability.VIEW_ARTICLE_STATS))


def sanitize_writeable_fields(actor: Actor, patch: dict[str, Any], creating: bool = False) -> dict[str, Any]:
    """Return the part of ``patch`` that ``actor`` is allowed to write.

    Unauthorized editorial flags and status changes are dropped silently
    instead of failing the request. On create the flags are forced to False
    and the status is derived from the role; on update they are removed from
    the effective patch so the stored values stay untouched.
    """
    effective = dict(patch)

    if not has_capability(actor, Capability.SET_EDITORIAL_FLAGS):
        for flag in EDITORIAL_FLAGS:
            if creating:
                if effective.get(flag):
                    logger.info("Forcing %s=False for role %r on create", flag, actor.role)
                effective[flag] = False
            elif flag in effective:
                logger.info("Dropping %s from update by role %r", flag, actor.role)
                effective.pop(flag)

    if creating:
        effective["status"] = derive_initial_status(actor.role, effective.get("status"))
    elif "status" in effective:
        narrowed = narrow_update_status(actor.role, effective["status"])
        if narrowed is None:
            effective.pop("status")
        else:
            effective["status"] = narrowed

    return effective


# Channels


def can_use_channel(actor: Optional[Actor], channel) -> Decision:
    """Attributing an article to a channel needs ownership or admin rights."""
    return _decide(is_owner_or_override(actor, channel, "owner_id", Capability.USE_ANY_CHANNEL))


def can_create_channel(actor: Optional[Actor]) -> Decision:
    return _decide(has_capability(actor, Capability.CREATE_CHANNEL))


def can_manage_channel(actor: Optional[Actor], channel) -> Decision:
    return _decide(is_owner_or_override(actor, channel, "owner_id", Capability.MANAGE_ANY_CHANNEL))


def can_verify_channel(actor: Optional[Actor]) -> Decision:
    return _decide(has_capability(actor, Capability.VERIFY_CHANNELS))


# Comments


def can_view_comment(actor: Optional[Actor], comment) -> Decision:
    """Unapproved comments are visible only to their author and moderators."""
    if comment.is_approved:
        return Decision.ALLOW
    return _decide(
        is_owner_or_override(actor, comment, "user_id", Capability.MODERATE_COMMENTS),
        Decision.NOT_FOUND,
    )


def can_mutate_comment(actor: Optional[Actor], comment) -> Decision:
    return _decide(is_owner_or_override(actor, comment, "user_id", Capability.MODERATE_COMMENTS))


# Bookmarks


def can_access_bookmark(actor: Optional[Actor], bookmark) -> Decision:
    """Bookmarks are private; other users are told they do not exist."""
    return _decide(is_owner_or_override(actor, bookmark, "user_id"), Decision.NOT_FOUND)


__all__ = [
    "Actor",
    "actor_from_request",
    "Decision",
    "enforce",
    "is_owner",
    "is_owner_or_override",
    "can_view",
    "can_create",
    "can_mutate",
    "can_change_status",
    "can_view_stats",
    "sanitize_writeable_fields",
    "can_use_channel",
    "can_create_channel",
    "can_manage_channel",
    "can_verify_channel",
    "can_view_comment",
    "can_mutate_comment",
    "can_access_bookmark",
]
