"""App configuration for the core project utilities."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Shared settings, URLs, middleware, envelope and error taxonomy."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
