"""System checks for capability-gated views."""

from django.core.checks import Error, register

from access_control.capabilities import Capability
from access_control.permissions import CapabilityPermission


@register()
def capability_views_declare_requirements(app_configs, **kwargs):
    """Ensure views gated by CapabilityPermission map their actions to capabilities.

    Only the project's known viewsets are inspected; new gated views should be
    added to the list below.
    """
    errors: list[Error] = []

    # Import here to avoid circular imports at module load time.
    from articles.views import ArticleViewSet
    from authentication.views import UserViewSet
    from catalog.views import CategoryViewSet, ChannelViewSet
    from engagement.views import BookmarkViewSet, CommentViewSet

    gated_views = [
        ArticleViewSet,
        CategoryViewSet,
        ChannelViewSet,
        CommentViewSet,
        BookmarkViewSet,
        UserViewSet,
    ]

    for view_cls in gated_views:
        if CapabilityPermission not in getattr(view_cls, "permission_classes", []):
            continue
        required = getattr(view_cls, "required_capabilities", None)
        if not isinstance(required, dict):
            errors.append(
                Error(
                    f"{view_cls.__name__} uses CapabilityPermission but does not "
                    f"define required_capabilities.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )
            continue
        for action, capability in required.items():
            if not isinstance(capability, Capability):
                errors.append(
                    Error(
                        f"{view_cls.__name__}.required_capabilities[{action!r}] is not a Capability.",
                        obj=view_cls,
                        id="access_control.E002",
                    )
                )

    return errors
