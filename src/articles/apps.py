"""App configuration for articles."""

from django.apps import AppConfig


class ArticlesConfig(AppConfig):
    """Articles app holds the Berita model, publication workflow and read-path narrowing."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "articles"
