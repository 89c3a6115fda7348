"""Serializers for authentication flows (register, login, profile, password)."""

from typing import cast

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from access_control.roles import Role, SELF_REGISTERABLE_ROLES

from .managers import UserManager

User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    """Validate and create a user; the role defaults to ``pengguna``.

    Visitors may register as reader, journalist or institution. Admin
    accounts are only created through the seed command or a superuser.
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    repeat_password = serializers.CharField(write_only=True, min_length=8)
    name = serializers.CharField(min_length=2, max_length=100)
    role = serializers.ChoiceField(
        choices=sorted(SELF_REGISTERABLE_ROLES),
        required=False,
        default=Role.READER.value,
    )

    @staticmethod
    def validate_email(value):
        """Ensure email is unique before creation."""
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already in use")
        return value

    def validate(self, attrs):
        """Ensure provided passwords match before creation."""
        if attrs.get("password") != attrs.get("repeat_password"):
            raise serializers.ValidationError("Passwords do not match")
        return attrs

    def create(self, validated_data):
        validated_data.pop("repeat_password")
        manager = cast(UserManager, User.objects)
        return manager.create_user(**validated_data)


class LoginSerializer(serializers.Serializer):
    """Authenticate a user via email/password using bcrypt verification."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """Authenticate credentials and attach the user to validated_data."""
        email = attrs.get("email")
        password = attrs.get("password")
        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise AuthenticationFailed("Invalid credentials")

        if not user.is_active:
            raise AuthenticationFailed("User is inactive")

        if not UserManager.verify_password(user, password):
            raise AuthenticationFailed("Invalid credentials")

        attrs["user"] = user
        return attrs


class UserSummarySerializer(serializers.Serializer):
    """Public author/owner projection embedded in articles, channels and comments."""

    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only user profile payload for responses."""

    class Meta:
        model = User
        fields = ["id", "email", "name", "role", "date_joined"]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Patchable fields for /auth/me updates."""

    class Meta:
        model = User
        fields = ["name"]
        extra_kwargs = {"name": {"required": False, "min_length": 2}}

    def validate(self, attrs):
        """Reject email and role changes instead of silently ignoring them."""
        initial = getattr(self, "initial_data", {})
        if "email" in initial:
            raise serializers.ValidationError("Email cannot be updated via this endpoint")
        if "role" in initial:
            raise serializers.ValidationError("Role cannot be updated via this endpoint")
        return super().validate(attrs)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=8)
    repeat_password = serializers.CharField(write_only=True, min_length=8)

    def validate(self, attrs):
        user = self.context["user"]
        if not UserManager.verify_password(user, attrs["current_password"]):
            raise serializers.ValidationError({"current_password": "Current password is incorrect"})
        if attrs["new_password"] != attrs["repeat_password"]:
            raise serializers.ValidationError("Passwords do not match")
        return attrs


class AccountSerializer(serializers.ModelSerializer):
    """Full account view for administrators."""

    class Meta:
        model = User
        fields = ["id", "email", "name", "role", "is_active", "date_joined", "updated_at"]
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    """Admin-created accounts may hold any role; email clashes are reported by the service."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    name = serializers.CharField(min_length=2, max_length=100)
    role = serializers.ChoiceField(choices=Role.choices, required=False, default=Role.READER.value)
    is_active = serializers.BooleanField(required=False, default=True)


class AccountUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    name = serializers.CharField(required=False, min_length=2, max_length=100)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    is_active = serializers.BooleanField(required=False)


class AccountQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=100)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    is_active = serializers.BooleanField(required=False)
    page = serializers.IntegerField(required=False)
    limit = serializers.IntegerField(required=False)
