"""Seed demo users for every role, categories, a channel and sample articles."""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from access_control.roles import Role
from articles.models import Article
from articles.state_machine import ArticleStatus
from authentication.managers import UserManager
from catalog.models import Category, Channel

SEED_PASSWORD = "portalpass123"

SEED_USERS = {
    Role.ADMIN.value: ("admin@example.com", "Admin Portal"),
    Role.JOURNALIST.value: ("jurnalis@example.com", "Jurnalis Portal"),
    Role.INSTITUTION.value: ("instansi@example.com", "Instansi Portal"),
    Role.READER.value: ("pengguna@example.com", "Pengguna Portal"),
}

SEED_CATEGORIES = [
    ("Politik", "politik"),
    ("Ekonomi", "ekonomi"),
    ("Teknologi", "teknologi"),
]

SEED_CHANNEL_SLUG = "kanal-pemkot"

SEED_ARTICLES = [
    ("Anggaran daerah 2025 disahkan", "anggaran-daerah-2025", ArticleStatus.PUBLISHED, Role.JOURNALIST),
    ("Startup lokal raih pendanaan", "startup-lokal-pendanaan", ArticleStatus.REVIEW, Role.JOURNALIST),
    ("Draf liputan pemilu", "draf-liputan-pemilu", ArticleStatus.DRAFT, Role.ADMIN),
    ("Pengumuman layanan publik", "pengumuman-layanan-publik", ArticleStatus.REVIEW, Role.INSTITUTION),
]


def create_seed_users(password: str = SEED_PASSWORD) -> dict:
    """Create one active user per role and return a role->User map."""
    User = get_user_model()
    users = {}
    for role, (email, name) in SEED_USERS.items():
        user, _ = User.objects.get_or_create(
            email=email,
            defaults={
                "name": name,
                "role": role,
                "password_hash": UserManager.hash_password(password),
                "is_staff": role == Role.ADMIN,
                "is_superuser": role == Role.ADMIN,
            },
        )
        users[role] = user
    return users


def create_seed_categories() -> dict:
    """Create the demo categories and return a slug->Category map."""
    categories = {}
    for name, slug in SEED_CATEGORIES:
        category, _ = Category.objects.get_or_create(slug=slug, defaults={"name": name})
        categories[slug] = category
    return categories


def create_seed_channel(owner) -> Channel:
    channel, _ = Channel.objects.get_or_create(
        slug=SEED_CHANNEL_SLUG,
        defaults={
            "name": "Kanal Pemerintah Kota",
            "description": "Informasi resmi pemerintah kota.",
            "owner": owner,
            "is_verified": True,
        },
    )
    return channel


def create_seed_articles(users: dict, categories: dict, channel: Channel | None = None) -> list:
    """Create sample articles in several workflow states."""
    category = next(iter(categories.values()))
    articles = []
    for title, slug, status, role in SEED_ARTICLES:
        article, _ = Article.objects.get_or_create(
            slug=slug,
            defaults={
                "title": title,
                "content": f"{title}. " + "Isi berita contoh untuk keperluan pengembangan. " * 3,
                "summary": title,
                "tags": ["contoh", "seed"],
                "category": category,
                "channel": channel if role == Role.INSTITUTION else None,
                "author": users[role.value],
                "status": status,
                "published_at": timezone.now() if status == ArticleStatus.PUBLISHED else None,
            },
        )
        articles.append(article)
    return articles


class Command(BaseCommand):
    """Management command to seed demo portal data."""

    help = (
        "Seed demo users for every role, categories, an institution channel and "
        "sample articles. Use --reset to clear previously seeded data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo users, articles, channel and categories before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if options.get("reset"):
            self._reset_seeded_data()

        self.stdout.write("Seeding portal data...")
        users = create_seed_users()
        categories = create_seed_categories()
        channel = create_seed_channel(users[Role.INSTITUTION.value])
        articles = create_seed_articles(users, categories, channel)
        self.stdout.write(
            self.style.SUCCESS(
                f"Portal seed completed: {len(users)} users, {len(categories)} categories, "
                f"{len(articles)} articles. Demo password: {SEED_PASSWORD}"
            )
        )

    def _reset_seeded_data(self) -> None:
        """Remove the demo rows created by this command.

        Categories and channels still referenced by other articles are kept.
        """
        self.stdout.write("Resetting previously seeded portal data...")

        Article.objects.filter(slug__in=[slug for _, slug, _, _ in SEED_ARTICLES]).delete()
        Channel.objects.filter(slug=SEED_CHANNEL_SLUG, articles__isnull=True).delete()
        Category.objects.filter(slug__in=[slug for _, slug in SEED_CATEGORIES], articles__isnull=True).delete()
        get_user_model().objects.filter(email__in=[email for email, _ in SEED_USERS.values()]).delete()

        self.stdout.write(self.style.WARNING("Seeded portal data cleared."))
