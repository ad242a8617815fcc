from django.test import TestCase

from users.models import CustomUser


class CustomUserModelTest(TestCase):
    def test_default_role_is_staff(self):
        user = CustomUser.objects.create_user(username="sam", password="pass12345")

        self.assertEqual(user.role, CustomUser.Role.STAFF)
        self.assertTrue(user.has_role("staff"))
        self.assertFalse(user.has_role("manager", "admin"))

    def test_superuser_passes_role_checks(self):
        admin = CustomUser.objects.create_superuser(
            username="root", password="pass12345", email="root@example.com"
        )

        self.assertTrue(admin.has_role("manager"))

    def test_str_prefers_full_name(self):
        user = CustomUser(username="sam", full_name="Sam Staff")

        self.assertEqual(str(user), "Sam Staff")
        self.assertEqual(str(CustomUser(username="sam")), "sam")
