from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from profiles.models import Profile, TaskerProfile
from tasks.models import Category

User = get_user_model()


class SeedGuestUsersTests(TestCase):
    def test_creates_guests_and_categories_idempotently(self):
        call_command("seed_guest_users", stdout=StringIO())
        call_command("seed_guest_users", stdout=StringIO())

        self.assertEqual(User.objects.filter(username__in=["casey", "taylor"]).count(), 2)
        self.assertEqual(Profile.objects.get(user__username="casey").role, "customer")
        self.assertEqual(Profile.objects.get(user__username="taylor").role, "tasker")
        self.assertTrue(TaskerProfile.objects.filter(profile__user__username="taylor").exists())
        self.assertEqual(Category.objects.filter(slug="cleaning").count(), 1)
        self.assertTrue(User.objects.get(username="casey").check_password("guest-casey-1"))
