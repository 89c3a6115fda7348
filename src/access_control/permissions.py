"""DRF permission class mapping viewset actions to role capabilities."""

from rest_framework import permissions

from .capabilities import has_capability
from .policy import Actor


class CapabilityPermission(permissions.BasePermission):
    """Coarse, view-level gate in front of the policy engine.

    Views declare ``public_actions`` (reachable without a token) and
    ``required_capabilities`` (action name to ``Capability``). Authenticated
    callers reaching an action with no entry pass through; resource-level
    rules such as ownership are decided by ``access_control.policy`` inside
    the service layer.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        action = getattr(view, "action", None) or request.method.lower()
        if action in getattr(view, "public_actions", ()):
            return True

        user = getattr(request, "user", None)
        if not user or not getattr(user, "is_authenticated", False):
            return False

        capability = getattr(view, "required_capabilities", {}).get(action)
        if capability is None:
            return True
        return has_capability(Actor.from_user(user), capability)


__all__ = ["CapabilityPermission"]
