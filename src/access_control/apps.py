"""App configuration for the access_control Django application.

Holds roles, capability grants and the policy engine; registers the
capability system checks on startup.
"""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Application configuration for the access_control app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"

    def ready(self) -> None:
        """Register system checks when the app is loaded."""
        from . import checks  # noqa: F401
