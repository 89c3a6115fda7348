"""Serializers for categories and institution channels."""

from django.core.validators import RegexValidator
from rest_framework import serializers

from authentication.serializers import UserSummarySerializer

from .models import Category, Channel

slug_validator = RegexValidator(
    r"^[a-z0-9-]+$",
    "Slug may only contain lowercase letters, digits and hyphens.",
)


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug"]
        read_only_fields = fields


class ChannelSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Channel
        fields = ["id", "name", "slug", "is_verified"]
        read_only_fields = fields


class CategorySerializer(serializers.ModelSerializer):
    """Category payload; slug uniqueness is checked by the service (409 on clash)."""

    slug = serializers.CharField(min_length=2, max_length=120, validators=[slug_validator])

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"name": {"min_length": 2}}


class ChannelSerializer(serializers.ModelSerializer):
    """Channel payload. ``owner`` is the creator and ``is_verified`` is admin-controlled."""

    slug = serializers.CharField(min_length=2, max_length=170, validators=[slug_validator])
    owner = UserSummarySerializer(read_only=True)

    class Meta:
        model = Channel
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "logo_url",
            "website_url",
            "contact_email",
            "contact_phone",
            "address",
            "owner",
            "is_verified",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner", "created_at", "updated_at"]
        extra_kwargs = {"name": {"min_length": 2}}


class CatalogQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    is_active = serializers.BooleanField(required=False)
    is_verified = serializers.BooleanField(required=False)
    page = serializers.IntegerField(required=False)
    limit = serializers.IntegerField(required=False)


__all__ = [
    "CategorySummarySerializer",
    "ChannelSummarySerializer",
    "CategorySerializer",
    "ChannelSerializer",
    "CatalogQuerySerializer",
]
