"""Shared helpers for tests (seeding, user creation, fake Redis, auth clients)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from access_control.roles import Role
from articles.models import Article
from articles.state_machine import ArticleStatus
from authentication.managers import UserManager
from authentication.services import TokenService
from catalog.models import Category, Channel
from scripts.management.commands.seed_portal import (
    create_seed_categories,
    create_seed_channel,
    create_seed_users,
)

User = get_user_model()

LONG_CONTENT = "Isi berita yang cukup panjang untuk lolos validasi minimal lima puluh karakter."


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


def seed_portal_basics(password: str = "StrongPass123") -> dict:
    """Create one user per role plus categories and a channel owned by the institution.

    Delegates to the helpers of the ``seed_portal`` management command to keep
    demo setup in a single place.
    """
    users = create_seed_users(password)
    categories = create_seed_categories()
    channel = create_seed_channel(users[Role.INSTITUTION.value])
    return {"users": users, "categories": categories, "channel": channel}


def create_user(email: str, password: str, role: str = Role.READER.value, **extra):
    """Create a user with a bcrypt-hashed password for tests."""

    extra.setdefault("name", email.split("@")[0])
    return User.objects.create(
        email=email,
        password_hash=UserManager.hash_password(password),
        role=role,
        **extra,
    )


def create_article(author, category: Category, channel: Channel | None = None, **fields) -> Article:
    """Insert an article directly, bypassing the workflow rules."""
    slug = fields.pop("slug", f"artikel-{Article.objects.count() + 1}")
    status = fields.pop("status", ArticleStatus.DRAFT)
    defaults = {
        "title": f"Judul {slug}",
        "content": LONG_CONTENT,
        "published_at": None,
    }
    defaults.update(fields)
    return Article.objects.create(
        slug=slug,
        author=author,
        category=category,
        channel=channel,
        status=status,
        **defaults,
    )


def auth_client(user) -> APIClient:
    """APIClient carrying a freshly minted access token for ``user``."""
    access, _ = TokenService.generate_tokens(user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    return client


class FakeRedisTestCase(TestCase):
    """TestCase that routes every Redis call to an in-memory fake."""

    @classmethod
    def setUpClass(cls):
        """Patch Redis clients to use in-memory fake for all tests."""
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        """Stop Redis patches after all tests complete."""
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()


class PortalTestCase(FakeRedisTestCase):
    """Seeds a user per role, categories and an institution channel."""

    @classmethod
    def setUpTestData(cls):
        seeded = seed_portal_basics()
        users = seeded["users"]
        cls.admin = users[Role.ADMIN.value]
        cls.journalist = users[Role.JOURNALIST.value]
        cls.institution = users[Role.INSTITUTION.value]
        cls.reader = users[Role.READER.value]
        cls.categories = seeded["categories"]
        cls.category = cls.categories["politik"]
        cls.channel = seeded["channel"]

    def setUp(self):
        self.anon = APIClient()

    @staticmethod
    def client_for(user) -> APIClient:
        return auth_client(user)
