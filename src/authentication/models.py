"""Custom User model using bcrypt-hashed passwords and a portal role.

Django's groups/permissions (PermissionsMixin) are not used; authorization
is decided from ``role`` by ``access_control``.
"""

from typing import Optional, ClassVar

from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from access_control.roles import Role

from .managers import UserManager


class User(AbstractBaseUser):
    """Portal user identified by email with bcrypt password hashes."""

    email = models.EmailField(unique=True)
    password_hash = models.CharField(max_length=128)
    name = models.CharField(max_length=100)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.READER)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    is_superuser = models.BooleanField(default=False)
    # Bumped whenever every older token must be rejected.
    token_version = models.PositiveIntegerField(default=1)
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["name"]

    objects = UserManager()

    class Meta:
        """Default ordering shows newest users first."""
        ordering = ["-date_joined"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.email

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = ""
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        """Delegate to bcrypt verification helper."""

        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


__all__ = ["User"]
