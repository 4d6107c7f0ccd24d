from django.test import SimpleTestCase

from core.sanitizers import MAX_ROLES, ValidationError, normalize_roles, sanitize_name, validate_url
from teams.serializers import JoinRequestCreateSerializer, RespondToRequestSerializer, TeamProfileSerializer


class RoleNormalizationTests(SimpleTestCase):
    def test_comma_separated_string(self):
        self.assertEqual(normalize_roles(" Backend, ,Design ,ML"), ["Backend", "Design", "ML"])

    def test_list_input(self):
        self.assertEqual(normalize_roles(["Backend", "  ", "<i>Design</i>"]), ["Backend", "Design"])

    def test_none_is_empty(self):
        self.assertEqual(normalize_roles(None), [])

    def test_rejects_other_types(self):
        with self.assertRaises(ValidationError):
            normalize_roles({"role": "Backend"})
        with self.assertRaises(ValidationError):
            normalize_roles(["Backend", 3])

    def test_too_many_roles(self):
        with self.assertRaises(ValidationError):
            normalize_roles([f"role{i}" for i in range(MAX_ROLES + 1)])


class SanitizerTests(SimpleTestCase):
    def test_name_is_single_line_plain_text(self):
        self.assertEqual(sanitize_name("  <b>Team</b>\n\nRocket  "), "Team Rocket")

    def test_url_scheme(self):
        self.assertIsNone(validate_url(""))
        self.assertEqual(validate_url(" https://example.com/a "), "https://example.com/a")
        with self.assertRaises(ValidationError):
            validate_url("ftp://example.com")


class TeamProfileSerializerTests(SimpleTestCase):
    def test_create_payload(self):
        serializer = TeamProfileSerializer(data={
            "name": "Team <b>A</b>",
            "roles_required": "Backend,Design",
            "is_public": False,
        })

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["name"], "Team A")
        self.assertEqual(serializer.validated_data["roles_required"], ["Backend", "Design"])
        self.assertFalse(serializer.validated_data["is_public"])

    def test_blank_name_after_sanitizing(self):
        serializer = TeamProfileSerializer(data={"name": "<b></b>"})

        self.assertFalse(serializer.is_valid())
        self.assertIn("name", serializer.errors)

    def test_overlong_name_rejected(self):
        serializer = TeamProfileSerializer(data={"name": "x" * 101})

        self.assertFalse(serializer.is_valid())
        self.assertIn("name", serializer.errors)

    def test_bad_roles(self):
        serializer = TeamProfileSerializer(data={"name": "Team A", "roles_required": 42})

        self.assertFalse(serializer.is_valid())
        self.assertIn("roles_required", serializer.errors)

    def test_partial_update_only_carries_sent_fields(self):
        serializer = TeamProfileSerializer(data={"bio": "Updated"}, partial=True)

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(dict(serializer.validated_data), {"bio": "Updated"})


class RequestSerializerTests(SimpleTestCase):
    def test_preferred_role_blank_becomes_none(self):
        serializer = JoinRequestCreateSerializer(data={"preferred_role": "   "})

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertIsNone(serializer.validated_data["preferred_role"])

    def test_overlong_preferred_role_rejected(self):
        serializer = JoinRequestCreateSerializer(data={"preferred_role": "r" * 51})

        self.assertFalse(serializer.is_valid())
        self.assertIn("preferred_role", serializer.errors)

    def test_action_normalized(self):
        serializer = RespondToRequestSerializer(data={"action": "Decline"})

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["action"], "decline")

    def test_unknown_action(self):
        serializer = RespondToRequestSerializer(data={"action": "ignore"})

        self.assertFalse(serializer.is_valid())
        self.assertIn("action", serializer.errors)
