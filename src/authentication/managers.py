"""User manager: account creation and the bcrypt helpers behind passwords."""

import bcrypt
from django.contrib.auth.base_user import BaseUserManager

from access_control.roles import Role


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email: str, password: str | None = None, **extra_fields):
        """Create an account; the role defaults to ``pengguna``."""
        if not email:
            raise ValueError("An email address is required")
        if password is None:
            raise ValueError("A password is required")

        extra_fields.setdefault("role", Role.READER.value)
        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.password_hash = self.hash_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str, **extra_fields):
        """``createsuperuser`` produces an admin-role account with staff flags set."""
        extra_fields.update(role=Role.ADMIN.value, is_staff=True, is_superuser=True, is_active=True)
        return self.create_user(email, password, **extra_fields)

    @staticmethod
    def hash_password(raw_password: str) -> str:
        return bcrypt.hashpw(raw_password.encode(), bcrypt.gensalt()).decode()

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Compare ``raw_password`` with the stored hash; accounts without one never match."""
        if not user.password_hash:
            return False
        return bcrypt.checkpw(raw_password.encode(), user.password_hash.encode())


__all__ = ["UserManager"]
