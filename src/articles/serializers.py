"""Serializers for article reads, writes, status changes and list queries."""

from django.core.validators import RegexValidator
from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from catalog.serializers import CategorySummarySerializer, ChannelSummarySerializer

from .models import Article
from .state_machine import ArticleStatus
from .visibility import ArticleListFilter

slug_validator = RegexValidator(
    r"^[a-z0-9-]+$",
    "Slug may only contain lowercase letters, digits and hyphens.",
)


class ArticleSerializer(serializers.ModelSerializer):
    """Read projection with the author, category and channel inlined."""

    author = UserSummarySerializer(read_only=True)
    category = CategorySummarySerializer(read_only=True)
    channel = ChannelSummarySerializer(read_only=True, allow_null=True)

    class Meta:
        model = Article
        fields = [
            "id",
            "title",
            "slug",
            "content",
            "summary",
            "image_url",
            "tags",
            "meta_title",
            "meta_description",
            "category",
            "channel",
            "status",
            "published_at",
            "author",
            "is_featured",
            "is_breaking_news",
            "views_count",
            "likes_count",
            "shares_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ArticleWriteSerializer(serializers.Serializer):
    """Payload for create (full) and update (partial).

    Only shape is validated here; references, ownership and workflow rules
    are applied by ``articles.services``.
    """

    title = serializers.CharField(min_length=5, max_length=255)
    slug = serializers.CharField(min_length=5, max_length=280, validators=[slug_validator])
    content = serializers.CharField(min_length=50)
    summary = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    tags = serializers.ListField(
        child=serializers.CharField(min_length=2, max_length=50),
        max_length=15,
        required=False,
    )
    meta_title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    meta_description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    category_id = serializers.IntegerField(min_value=1)
    channel_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=ArticleStatus.choices, required=False)
    is_featured = serializers.BooleanField(required=False)
    is_breaking_news = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("At least one field must be provided.")
        return attrs


class ArticleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ArticleStatus.choices)


class ArticleListQuerySerializer(serializers.Serializer):
    """Query string of the list endpoints.

    ``sort`` and ``order`` are free text; unknown values fall back to the
    default ordering instead of failing the request.
    """

    category_id = serializers.IntegerField(required=False, min_value=1)
    status = serializers.ChoiceField(choices=ArticleStatus.choices, required=False)
    author_id = serializers.IntegerField(required=False, min_value=1)
    channel_id = serializers.IntegerField(required=False, min_value=1)
    is_featured = serializers.BooleanField(required=False)
    is_breaking_news = serializers.BooleanField(required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=200)
    sort = serializers.CharField(required=False, allow_blank=True, max_length=50)
    order = serializers.CharField(required=False, allow_blank=True, max_length=10)
    page = serializers.IntegerField(required=False)
    limit = serializers.IntegerField(required=False)

    def to_filter(self) -> ArticleListFilter:
        return ArticleListFilter(**self.validated_data)


__all__ = [
    "ArticleSerializer",
    "ArticleWriteSerializer",
    "ArticleStatusSerializer",
    "ArticleListQuerySerializer",
]
