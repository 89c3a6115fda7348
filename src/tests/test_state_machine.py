"""Unit tests for the article publication workflow."""

from datetime import datetime, timezone as dt_timezone

from django.test import SimpleTestCase

from articles.state_machine import (
    ArticleStatus,
    apply_status_transition,
    derive_initial_status,
    initial_transition,
    narrow_update_status,
)

ALL_STATUSES = list(ArticleStatus.values)
EARLIER = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)


class DeriveInitialStatusTests(SimpleTestCase):
    def test_reader_always_gets_draft(self):
        """Readers cannot choose the initial status of an article."""
        for requested in ALL_STATUSES + [None]:
            with self.subTest(requested=requested):
                self.assertEqual(derive_initial_status("pengguna", requested), "draft")

    def test_institution_publish_request_goes_to_review(self):
        self.assertEqual(derive_initial_status("instansi", "published"), "review")

    def test_institution_other_statuses_pass_through(self):
        self.assertEqual(derive_initial_status("instansi", "draft"), "draft")
        self.assertEqual(derive_initial_status("instansi", "review"), "review")

    def test_editors_keep_requested_status(self):
        for role in ("admin", "jurnalis"):
            for requested in ALL_STATUSES:
                with self.subTest(role=role, requested=requested):
                    self.assertEqual(derive_initial_status(role, requested), requested)

    def test_missing_status_defaults_to_draft(self):
        self.assertEqual(derive_initial_status("jurnalis", None), "draft")
        self.assertEqual(derive_initial_status("admin", ""), "draft")


class NarrowUpdateStatusTests(SimpleTestCase):
    def test_editors_may_set_any_status(self):
        for role in ("admin", "jurnalis"):
            for requested in ALL_STATUSES:
                with self.subTest(role=role, requested=requested):
                    self.assertEqual(narrow_update_status(role, requested), requested)

    def test_institution_may_only_request_review(self):
        self.assertEqual(narrow_update_status("instansi", "review"), "review")
        for requested in ("draft", "published", "rejected", "archived"):
            with self.subTest(requested=requested):
                self.assertIsNone(narrow_update_status("instansi", requested))

    def test_reader_may_only_request_draft(self):
        self.assertEqual(narrow_update_status("pengguna", "draft"), "draft")
        self.assertIsNone(narrow_update_status("pengguna", "published"))

    def test_unknown_role_gets_nothing(self):
        self.assertIsNone(narrow_update_status("tamu", "draft"))

    def test_no_request_means_no_change(self):
        self.assertIsNone(narrow_update_status("admin", None))


class ApplyStatusTransitionTests(SimpleTestCase):
    def test_first_publication_is_stamped(self):
        transition = apply_status_transition("review", "published", "jurnalis")

        self.assertEqual(transition.status, "published")
        self.assertIsNotNone(transition.published_at)
        self.assertTrue(transition.stamps_publication)
        self.assertTrue(transition.changed)

    def test_redundant_publish_does_not_restamp(self):
        transition = apply_status_transition(
            "published", "published", "admin", prior_published_at=EARLIER
        )

        self.assertEqual(transition.status, "published")
        self.assertIsNone(transition.published_at)
        self.assertFalse(transition.changed)

    def test_republishing_archived_article_keeps_original_stamp(self):
        transition = apply_status_transition(
            "archived", "published", "admin", dedicated=True, prior_published_at=EARLIER
        )

        self.assertEqual(transition.status, "published")
        self.assertFalse(transition.stamps_publication)

    def test_archiving_never_stamps(self):
        transition = apply_status_transition("published", "archived", "jurnalis", prior_published_at=EARLIER)

        self.assertEqual(transition.status, "archived")
        self.assertIsNone(transition.published_at)

    def test_dropped_request_keeps_prior_status(self):
        """A reader asking to publish through the update path changes nothing."""
        transition = apply_status_transition("draft", "published", "pengguna")

        self.assertEqual(transition.status, "draft")
        self.assertIsNone(transition.published_at)
        self.assertFalse(transition.changed)

    def test_dedicated_endpoint_applies_request_as_is(self):
        transition = apply_status_transition("draft", "rejected", "jurnalis", dedicated=True)

        self.assertEqual(transition.status, "rejected")

    def test_institution_review_request_is_honoured(self):
        transition = apply_status_transition("draft", "review", "instansi")

        self.assertEqual(transition.status, "review")
        self.assertTrue(transition.changed)


class InitialTransitionTests(SimpleTestCase):
    def test_published_on_create_is_stamped(self):
        transition = initial_transition("admin", "published")

        self.assertEqual(transition.status, "published")
        self.assertIsNotNone(transition.published_at)

    def test_institution_publish_on_create_is_not_stamped(self):
        transition = initial_transition("instansi", "published")

        self.assertEqual(transition.status, "review")
        self.assertIsNone(transition.published_at)
