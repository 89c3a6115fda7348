"""Article (Berita) model carrying the publication workflow state."""

from django.conf import settings
from django.db import models

from .state_machine import ArticleStatus


class Article(models.Model):
    """News article owned by its author and filed under a category.

    ``published_at`` is set the first time the article is published and is
    never cleared afterwards. ``author`` does not change after creation.
    """

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=280, unique=True)
    content = models.TextField()
    summary = models.TextField(max_length=1000, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    tags = models.JSONField(default=list, blank=True)
    meta_title = models.CharField(max_length=255, blank=True)
    meta_description = models.TextField(max_length=500, blank=True)
    category = models.ForeignKey("catalog.Category", on_delete=models.PROTECT, related_name="articles")
    channel = models.ForeignKey(
        "catalog.Channel",
        on_delete=models.PROTECT,
        related_name="articles",
        null=True,
        blank=True,
    )
    status = models.CharField(max_length=20, choices=ArticleStatus.choices, default=ArticleStatus.DRAFT)
    published_at = models.DateTimeField(null=True, blank=True)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="articles")
    is_featured = models.BooleanField(default=False)
    is_breaking_news = models.BooleanField(default=False)
    views_count = models.PositiveIntegerField(default=0)
    likes_count = models.PositiveIntegerField(default=0)
    shares_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-published_at"], name="article_status_pub_idx"),
            models.Index(fields=["author", "status"], name="article_author_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    @property
    def is_published(self) -> bool:
        return self.status == ArticleStatus.PUBLISHED


__all__ = ["Article", "ArticleStatus"]
