"""Serializers for comments and bookmarks."""

from rest_framework import serializers

from articles.serializers import ArticleSerializer
from authentication.serializers import UserSummarySerializer

from .models import Bookmark, Comment


class CommentSerializer(serializers.ModelSerializer):
    article_id = serializers.IntegerField(read_only=True)
    parent_id = serializers.IntegerField(read_only=True, allow_null=True)
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Comment
        fields = [
            "id",
            "article_id",
            "parent_id",
            "user",
            "content",
            "is_approved",
            "is_reported",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField(min_length=1, max_length=1000)
    parent_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class CommentUpdateSerializer(serializers.Serializer):
    """Authors may edit ``content``; the moderation flags are honoured for admins only."""

    content = serializers.CharField(min_length=1, max_length=1000, required=False)
    is_approved = serializers.BooleanField(required=False)
    is_reported = serializers.BooleanField(required=False)


class BookmarkSerializer(serializers.ModelSerializer):
    article = ArticleSerializer(read_only=True)

    class Meta:
        model = Bookmark
        fields = ["id", "article", "created_at"]
        read_only_fields = fields


class BookmarkCreateSerializer(serializers.Serializer):
    article_id = serializers.IntegerField(min_value=1)


class BookmarkBulkDeleteSerializer(serializers.Serializer):
    bookmark_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=100)


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False)
    limit = serializers.IntegerField(required=False)


__all__ = [
    "CommentSerializer",
    "CommentCreateSerializer",
    "CommentUpdateSerializer",
    "BookmarkSerializer",
    "BookmarkCreateSerializer",
    "BookmarkBulkDeleteSerializer",
    "PageQuerySerializer",
]
