"""Unit tests for the authorization policy engine and capability table."""

from types import SimpleNamespace

from django.test import SimpleTestCase

from access_control.capabilities import Capability, EDITORIAL_CAPABILITIES, ROLE_CAPABILITIES, has_capability
from access_control.policy import (
    Actor,
    Decision,
    can_access_bookmark,
    can_change_status,
    can_create,
    can_manage_channel,
    can_mutate,
    can_use_channel,
    can_view,
    can_view_comment,
    enforce,
    is_owner_or_override,
    sanitize_writeable_fields,
)
from access_control.roles import PRIVILEGED_ROLES, Role
from core.exceptions import ForbiddenError, NotFoundError

ADMIN = Actor(id=1, role="admin")
JOURNALIST = Actor(id=2, role="jurnalis")
AUTHOR = Actor(id=3, role="pengguna")
STRANGER = Actor(id=4, role="pengguna")
INSTITUTION = Actor(id=7, role="instansi")


def article(status="draft", author_id=3):
    return SimpleNamespace(status=status, author_id=author_id)


class CapabilityTableTests(SimpleTestCase):
    def test_privileged_roles_are_admin_and_journalist(self):
        self.assertEqual(PRIVILEGED_ROLES, {"admin", "jurnalis"})

    def test_editorial_set_follows_privileged_roles(self):
        for role in Role.values:
            with self.subTest(role=role):
                self.assertEqual(
                    EDITORIAL_CAPABILITIES <= ROLE_CAPABILITIES[role],
                    role in PRIVILEGED_ROLES,
                )

    def test_user_management_and_portal_stats_are_admin_only(self):
        for capability in (Capability.MANAGE_USERS, Capability.VIEW_PORTAL_STATS):
            holders = {role for role, grants in ROLE_CAPABILITIES.items() if capability in grants}
            self.assertEqual(holders, {"admin"})

    def test_admin_holds_every_capability(self):
        self.assertEqual(ROLE_CAPABILITIES["admin"], frozenset(Capability))

    def test_reader_holds_nothing(self):
        self.assertEqual(ROLE_CAPABILITIES["pengguna"], frozenset())

    def test_role_choice_and_plain_string_behave_alike(self):
        self.assertEqual(Actor(id=1, role=Role.ADMIN), ADMIN)
        self.assertTrue(has_capability(Actor(id=9, role=Role.JOURNALIST), Capability.SET_ANY_STATUS))

    def test_anonymous_has_no_capability(self):
        self.assertFalse(has_capability(None, Capability.CREATE_ARTICLE))


class ViewRuleTests(SimpleTestCase):
    def test_published_article_visible_to_everyone(self):
        for actor in (None, STRANGER, INSTITUTION):
            with self.subTest(actor=actor):
                self.assertIs(can_view(actor, article("published")), Decision.ALLOW)

    def test_unpublished_article_visible_to_author_and_editors(self):
        for actor in (AUTHOR, ADMIN, JOURNALIST):
            with self.subTest(actor=actor):
                self.assertIs(can_view(actor, article("review")), Decision.ALLOW)

    def test_unpublished_article_is_not_found_for_others(self):
        """Hidden drafts are reported as missing, never as forbidden."""
        for actor in (None, STRANGER, INSTITUTION):
            with self.subTest(actor=actor):
                self.assertIs(can_view(actor, article("draft")), Decision.NOT_FOUND)


class WriteRuleTests(SimpleTestCase):
    def test_create_allowed_for_admin_journalist_and_institution(self):
        for actor in (ADMIN, JOURNALIST, INSTITUTION):
            with self.subTest(actor=actor):
                self.assertIs(can_create(actor), Decision.ALLOW)

    def test_create_denied_for_reader_and_anonymous(self):
        self.assertIs(can_create(AUTHOR), Decision.FORBIDDEN)
        self.assertIs(can_create(None), Decision.FORBIDDEN)

    def test_foreign_channel_needs_admin(self):
        foreign = SimpleNamespace(owner_id=9)
        self.assertIs(can_use_channel(INSTITUTION, foreign), Decision.FORBIDDEN)
        self.assertIs(can_use_channel(INSTITUTION, SimpleNamespace(owner_id=7)), Decision.ALLOW)
        self.assertIs(can_use_channel(ADMIN, foreign), Decision.ALLOW)

    def test_mutate_allowed_for_author_and_editors(self):
        for actor in (AUTHOR, ADMIN, JOURNALIST):
            with self.subTest(actor=actor):
                self.assertIs(can_mutate(actor, article()), Decision.ALLOW)

    def test_mutate_forbidden_for_other_users(self):
        self.assertIs(can_mutate(STRANGER, article()), Decision.FORBIDDEN)
        self.assertIs(can_mutate(INSTITUTION, article()), Decision.FORBIDDEN)

    def test_delete_override_is_its_own_capability(self):
        self.assertIs(can_mutate(JOURNALIST, article(), Capability.DELETE_ANY_ARTICLE), Decision.ALLOW)
        self.assertIs(can_mutate(STRANGER, article(), Capability.DELETE_ANY_ARTICLE), Decision.FORBIDDEN)

    def test_change_status_ignores_ownership(self):
        self.assertIs(can_change_status(ADMIN), Decision.ALLOW)
        self.assertIs(can_change_status(JOURNALIST), Decision.ALLOW)
        self.assertIs(can_change_status(AUTHOR), Decision.FORBIDDEN)
        self.assertIs(can_change_status(INSTITUTION), Decision.FORBIDDEN)


class OwnershipPredicateTests(SimpleTestCase):
    def test_owner_field_is_configurable(self):
        channel = SimpleNamespace(owner_id=7)
        self.assertTrue(is_owner_or_override(INSTITUTION, channel, "owner_id"))
        self.assertFalse(is_owner_or_override(STRANGER, channel, "owner_id"))

    def test_override_capability_wins(self):
        channel = SimpleNamespace(owner_id=7)
        self.assertTrue(is_owner_or_override(ADMIN, channel, "owner_id", Capability.MANAGE_ANY_CHANNEL))
        self.assertFalse(is_owner_or_override(JOURNALIST, channel, "owner_id", Capability.MANAGE_ANY_CHANNEL))

    def test_anonymous_never_owns(self):
        self.assertFalse(is_owner_or_override(None, SimpleNamespace(user_id=None), "user_id"))

    def test_channel_rules(self):
        channel = SimpleNamespace(owner_id=7)
        self.assertIs(can_use_channel(INSTITUTION, channel), Decision.ALLOW)
        self.assertIs(can_use_channel(JOURNALIST, channel), Decision.FORBIDDEN)
        self.assertIs(can_manage_channel(ADMIN, channel), Decision.ALLOW)

    def test_unapproved_comment_hidden_from_others(self):
        comment = SimpleNamespace(user_id=3, is_approved=False)
        self.assertIs(can_view_comment(AUTHOR, comment), Decision.ALLOW)
        self.assertIs(can_view_comment(ADMIN, comment), Decision.ALLOW)
        self.assertIs(can_view_comment(STRANGER, comment), Decision.NOT_FOUND)

    def test_bookmarks_are_private_even_for_admins(self):
        bookmark = SimpleNamespace(user_id=3)
        self.assertIs(can_access_bookmark(AUTHOR, bookmark), Decision.ALLOW)
        self.assertIs(can_access_bookmark(ADMIN, bookmark), Decision.NOT_FOUND)


class SanitizeWriteableFieldsTests(SimpleTestCase):
    def test_flags_forced_false_on_create_for_non_privileged(self):
        effective = sanitize_writeable_fields(
            INSTITUTION, {"is_featured": True, "is_breaking_news": True}, creating=True
        )

        self.assertFalse(effective["is_featured"])
        self.assertFalse(effective["is_breaking_news"])

    def test_flags_dropped_on_update_for_non_privileged(self):
        effective = sanitize_writeable_fields(AUTHOR, {"title": "Baru", "is_featured": True})

        self.assertEqual(effective, {"title": "Baru"})

    def test_flags_kept_for_editors(self):
        effective = sanitize_writeable_fields(JOURNALIST, {"is_featured": True})

        self.assertTrue(effective["is_featured"])

    def test_status_derived_on_create(self):
        self.assertEqual(
            sanitize_writeable_fields(INSTITUTION, {"status": "published"}, creating=True)["status"],
            "review",
        )

    def test_unauthorized_status_dropped_on_update(self):
        effective = sanitize_writeable_fields(AUTHOR, {"title": "Baru", "status": "published"})

        self.assertNotIn("status", effective)
        self.assertEqual(effective["title"], "Baru")

    def test_input_patch_is_not_modified(self):
        patch = {"is_featured": True, "status": "published"}
        sanitize_writeable_fields(AUTHOR, patch)

        self.assertEqual(patch, {"is_featured": True, "status": "published"})


class EnforceTests(SimpleTestCase):
    def test_allow_returns_quietly(self):
        self.assertIsNone(enforce(Decision.ALLOW))

    def test_forbidden_raises_with_field(self):
        with self.assertRaises(ForbiddenError) as ctx:
            enforce(Decision.FORBIDDEN, "Nope.", field="channel_id")
        self.assertEqual(ctx.exception.as_error(), {"field": "channel_id", "message": "Nope."})

    def test_not_found_raises(self):
        with self.assertRaises(NotFoundError):
            enforce(Decision.NOT_FOUND)
