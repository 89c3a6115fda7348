"""Tests for the category and channel endpoints."""

from catalog.models import Category, Channel
from tests.utils import PortalTestCase, create_article, create_user


class CategoryApiTests(PortalTestCase):
    def test_public_list_is_paginated_and_enveloped(self):
        response = self.anon.get("/categories/", {"limit": 2})
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["errors"], [])
        self.assertEqual(len(body["data"]), 2)
        self.assertEqual(body["meta"]["total_items"], 3)
        self.assertEqual(body["meta"]["total_pages"], 2)

    def test_list_filters_by_active_flag(self):
        Category.objects.filter(slug="teknologi").update(is_active=False)

        body = self.anon.get("/categories/", {"is_active": "false"}).json()

        self.assertEqual([item["slug"] for item in body["data"]], ["teknologi"])

    def test_list_search(self):
        body = self.anon.get("/categories/", {"search": "ekon"}).json()

        self.assertEqual([item["slug"] for item in body["data"]], ["ekonomi"])

    def test_detail_and_slug_lookup(self):
        by_id = self.anon.get(f"/categories/{self.category.id}/")
        by_slug = self.anon.get("/categories/slug/politik/")

        self.assertEqual(by_id.status_code, 200)
        self.assertEqual(by_slug.json()["data"]["id"], self.category.id)
        self.assertEqual(self.anon.get("/categories/999999/").status_code, 404)

    def test_admin_creates_category(self):
        response = self.client_for(self.admin).post(
            "/categories/", {"name": "Olahraga", "slug": "olahraga"}, format="json"
        )

        self.assertEqual(response.status_code, 201)
        self.assertTrue(Category.objects.filter(slug="olahraga").exists())

    def test_non_admin_cannot_write_categories(self):
        for user in (self.journalist, self.institution, self.reader):
            with self.subTest(role=user.role):
                response = self.client_for(user).post(
                    "/categories/", {"name": "Olahraga", "slug": "olahraga"}, format="json"
                )
                self.assertEqual(response.status_code, 403)
        self.assertFalse(Category.objects.filter(slug="olahraga").exists())

    def test_anonymous_write_requires_authentication(self):
        response = self.anon.post("/categories/", {"name": "Olahraga", "slug": "olahraga"}, format="json")

        self.assertEqual(response.status_code, 401)

    def test_duplicate_slug_conflict(self):
        response = self.client_for(self.admin).post(
            "/categories/", {"name": "Politik Lagi", "slug": "politik"}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["errors"][0]["field"], "slug")

    def test_admin_updates_category(self):
        response = self.client_for(self.admin).patch(
            f"/categories/{self.category.id}/", {"description": "Berita politik nasional"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.category.refresh_from_db()
        self.assertEqual(self.category.description, "Berita politik nasional")

    def test_empty_update_rejected(self):
        response = self.client_for(self.admin).patch(f"/categories/{self.category.id}/", {}, format="json")

        self.assertEqual(response.status_code, 400)

    def test_delete_unused_category(self):
        unused = self.categories["teknologi"]

        response = self.client_for(self.admin).delete(f"/categories/{unused.id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Category.objects.filter(pk=unused.pk).exists())

    def test_delete_category_in_use_rejected(self):
        create_article(self.journalist, self.category, slug="memakai-kategori")

        response = self.client_for(self.admin).delete(f"/categories/{self.category.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Category.objects.filter(pk=self.category.pk).exists())

    def test_active_lists_active_categories_by_name(self):
        Category.objects.filter(slug="teknologi").update(is_active=False)

        response = self.anon.get("/categories/active/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["slug"] for item in response.json()["data"]], ["ekonomi", "politik"])

    def test_stats_counts_and_top_categories(self):
        create_article(self.journalist, self.category, slug="artikel-satu")
        create_article(self.journalist, self.category, slug="artikel-dua")
        create_article(self.journalist, self.categories["ekonomi"], slug="artikel-tiga")
        Category.objects.filter(slug="teknologi").update(is_active=False)

        response = self.client_for(self.admin).get("/categories/stats/")
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual((data["total"], data["active"], data["inactive"]), (3, 2, 1))
        self.assertEqual(data["created_today"], 3)
        self.assertEqual(
            [(item["slug"], item["article_count"]) for item in data["top_categories"]],
            [("politik", 2), ("ekonomi", 1)],
        )

    def test_stats_reserved_to_admin(self):
        self.assertEqual(self.client_for(self.journalist).get("/categories/stats/").status_code, 403)
        self.assertEqual(self.anon.get("/categories/stats/").status_code, 401)


class ChannelApiTests(PortalTestCase):
    def _payload(self, **overrides):
        payload = {"name": "Kanal Dinas Kesehatan", "slug": "kanal-dinkes"}
        payload.update(overrides)
        return payload

    def test_public_list_and_detail(self):
        listing = self.anon.get("/channels/").json()
        detail = self.anon.get(f"/channels/{self.channel.id}/").json()

        self.assertEqual([item["slug"] for item in listing["data"]], ["kanal-pemkot"])
        self.assertEqual(detail["data"]["owner"]["id"], self.institution.id)
        self.assertTrue(detail["data"]["is_verified"])

    def test_list_filters_by_verified_flag(self):
        Channel.objects.create(name="Kanal Baru", slug="kanal-baru", owner=self.institution)

        body = self.anon.get("/channels/", {"is_verified": "false"}).json()

        self.assertEqual([item["slug"] for item in body["data"]], ["kanal-baru"])

    def test_slug_lookup(self):
        response = self.anon.get("/channels/slug/kanal-pemkot/")

        self.assertEqual(response.json()["data"]["id"], self.channel.id)
        self.assertEqual(self.anon.get("/channels/slug/tidak-ada/").status_code, 404)

    def test_institution_creates_unverified_channel(self):
        response = self.client_for(self.institution).post(
            "/channels/", self._payload(is_verified=True), format="json"
        )
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertFalse(body["data"]["is_verified"])
        self.assertEqual(body["data"]["owner"]["id"], self.institution.id)

    def test_reader_and_journalist_cannot_create_channels(self):
        for user in (self.reader, self.journalist):
            with self.subTest(role=user.role):
                response = self.client_for(user).post("/channels/", self._payload(), format="json")
                self.assertEqual(response.status_code, 403)
        self.assertFalse(Channel.objects.filter(slug="kanal-dinkes").exists())

    def test_duplicate_slug_conflict(self):
        response = self.client_for(self.institution).post(
            "/channels/", self._payload(slug="kanal-pemkot"), format="json"
        )

        self.assertEqual(response.status_code, 409)

    def test_mine_lists_only_own_channels(self):
        other = create_user("lain@example.com", "StrongPass123", "instansi")
        Channel.objects.create(name="Kanal Lain", slug="kanal-lain", owner=other)

        body = self.client_for(self.institution).get("/channels/mine/").json()

        self.assertEqual([item["slug"] for item in body["data"]], ["kanal-pemkot"])

    def test_owner_updates_channel_but_cannot_verify(self):
        Channel.objects.filter(pk=self.channel.pk).update(is_verified=False)

        response = self.client_for(self.institution).patch(
            f"/channels/{self.channel.id}/",
            {"description": "Deskripsi baru", "is_verified": True},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.channel.refresh_from_db()
        self.assertEqual(self.channel.description, "Deskripsi baru")
        self.assertFalse(self.channel.is_verified)

    def test_verification_only_update_from_owner_rejected(self):
        response = self.client_for(self.institution).patch(
            f"/channels/{self.channel.id}/", {"is_verified": False}, format="json"
        )

        self.assertEqual(response.status_code, 400)

    def test_admin_verifies_channel(self):
        Channel.objects.filter(pk=self.channel.pk).update(is_verified=False)

        response = self.client_for(self.admin).patch(
            f"/channels/{self.channel.id}/", {"is_verified": True}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["is_verified"])

    def test_stranger_cannot_manage_channel(self):
        other = create_user("lain@example.com", "StrongPass123", "instansi")

        update = self.client_for(other).patch(
            f"/channels/{self.channel.id}/", {"description": "Dibajak"}, format="json"
        )
        delete = self.client_for(other).delete(f"/channels/{self.channel.id}/")

        self.assertEqual(update.status_code, 403)
        self.assertEqual(delete.status_code, 403)
        self.assertTrue(Channel.objects.filter(pk=self.channel.pk).exists())

    def test_delete_channel_in_use_rejected(self):
        create_article(self.institution, self.category, channel=self.channel, slug="artikel-kanal")

        response = self.client_for(self.institution).delete(f"/channels/{self.channel.id}/")

        self.assertEqual(response.status_code, 400)

    def test_owner_deletes_unused_channel(self):
        response = self.client_for(self.institution).delete(f"/channels/{self.channel.id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Channel.objects.filter(pk=self.channel.pk).exists())

    def test_verified_lists_verified_active_channels(self):
        Channel.objects.create(name="Kanal Baru", slug="kanal-baru", owner=self.institution)
        Channel.objects.create(
            name="Kanal Lama", slug="kanal-lama", owner=self.institution, is_verified=True, is_active=False
        )

        response = self.anon.get("/channels/verified/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["slug"] for item in response.json()["data"]], ["kanal-pemkot"])

    def test_stats_counts_and_top_channels(self):
        Channel.objects.create(name="Kanal Baru", slug="kanal-baru", owner=self.institution)
        create_article(self.institution, self.category, channel=self.channel, slug="artikel-kanal")

        response = self.client_for(self.admin).get("/channels/stats/")
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual((data["total"], data["verified"], data["unverified"]), (2, 1, 1))
        self.assertEqual((data["active"], data["inactive"]), (2, 0))
        self.assertEqual(
            [(item["slug"], item["article_count"]) for item in data["top_channels"]],
            [("kanal-pemkot", 1)],
        )

    def test_stats_reserved_to_admin(self):
        self.assertEqual(self.client_for(self.institution).get("/channels/stats/").status_code, 403)
