"""App configuration for the catalog of categories and channels."""

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """Catalog app holds categories and institution channels."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"
