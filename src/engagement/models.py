"""Reader engagement: comments on articles and private bookmarks."""

from django.conf import settings
from django.db import models


class Comment(models.Model):
    """Comment (Komentar) on an article, optionally replying to another comment."""

    article = models.ForeignKey("articles.Article", on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="comments")
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        related_name="replies",
        null=True,
        blank=True,
    )
    content = models.TextField(max_length=1000)
    is_approved = models.BooleanField(default=True)
    is_reported = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Comment {self.pk} on article {self.article_id}"


class Bookmark(models.Model):
    """A user's saved article; each article can be bookmarked once per user."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookmarks")
    article = models.ForeignKey("articles.Article", on_delete=models.CASCADE, related_name="bookmarks")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "article"], name="unique_bookmark_per_user"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Bookmark {self.user_id}:{self.article_id}"


__all__ = ["Comment", "Bookmark"]
