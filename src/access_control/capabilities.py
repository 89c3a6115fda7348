"""Capability grants per role.

Every authorization rule asks ``has_capability`` instead of comparing role
strings, so granting a capability to another role is a one-line change in
``ROLE_CAPABILITIES``.
"""

import enum

from .roles import PRIVILEGED_ROLES, Role


class Capability(enum.Enum):
    CREATE_ARTICLE = "create_article"
    VIEW_UNPUBLISHED = "view_unpublished"
    LIST_ANY_STATUS = "list_any_status"
    EDIT_ANY_ARTICLE = "edit_any_article"
    DELETE_ANY_ARTICLE = "delete_any_article"
    CHANGE_ARTICLE_STATUS = "change_article_status"
    SET_ANY_STATUS = "set_any_status"
    SET_EDITORIAL_FLAGS = "set_editorial_flags"
    VIEW_ARTICLE_STATS = "view_article_stats"
    VIEW_ALL_ARTICLE_STATS = "view_all_article_stats"
    USE_ANY_CHANNEL = "use_any_channel"
    CREATE_CHANNEL = "create_channel"
    MANAGE_ANY_CHANNEL = "manage_any_channel"
    VERIFY_CHANNELS = "verify_channels"
    MANAGE_CATEGORIES = "manage_categories"
    MODERATE_COMMENTS = "moderate_comments"
    MANAGE_USERS = "manage_users"
    VIEW_PORTAL_STATS = "view_portal_stats"


# Editorial powers shared by every privileged role.
EDITORIAL_CAPABILITIES = frozenset(
    {
        Capability.CREATE_ARTICLE,
        Capability.VIEW_UNPUBLISHED,
        Capability.LIST_ANY_STATUS,
        Capability.EDIT_ANY_ARTICLE,
        Capability.DELETE_ANY_ARTICLE,
        Capability.CHANGE_ARTICLE_STATUS,
        Capability.SET_ANY_STATUS,
        Capability.SET_EDITORIAL_FLAGS,
        Capability.VIEW_ARTICLE_STATS,
    }
)

# Grants outside the editorial set. Admin holds every remaining capability.
_ROLE_GRANTS: dict[str, frozenset[Capability]] = {
    Role.ADMIN.value: frozenset(Capability) - EDITORIAL_CAPABILITIES,
    Role.JOURNALIST.value: frozenset(),
    Role.INSTITUTION.value: frozenset({Capability.CREATE_ARTICLE, Capability.CREATE_CHANNEL}),
    Role.READER.value: frozenset(),
}

ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    role: grants | (EDITORIAL_CAPABILITIES if role in PRIVILEGED_ROLES else frozenset())
    for role, grants in _ROLE_GRANTS.items()
}


def role_has_capability(role: str | None, capability: Capability) -> bool:
    """Return True if ``role`` is granted ``capability``; unknown roles get nothing."""
    if role is None:
        return False
    return capability in ROLE_CAPABILITIES.get(str(role), frozenset())


def has_capability(actor, capability: Capability) -> bool:
    """Capability lookup for an actor; anonymous callers hold no capabilities."""
    if actor is None:
        return False
    return role_has_capability(actor.role, capability)


__all__ = [
    "Capability",
    "EDITORIAL_CAPABILITIES",
    "ROLE_CAPABILITIES",
    "role_has_capability",
    "has_capability",
]
