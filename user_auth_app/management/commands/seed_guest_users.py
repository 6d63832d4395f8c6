from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.utils.text import slugify
from rest_framework.authtoken.models import Token

from profiles.models import Profile, TaskerProfile
from tasks.models import Category

GUESTS = {
    "customer": {"username": "casey", "password": "guest-casey-1", "email": "casey@example.com",
                 "full_name": "Casey Customer"},
    "tasker": {"username": "taylor", "password": "guest-taylor-1", "email": "taylor@example.com",
               "full_name": "Taylor Tasker"},
}

CATEGORIES = [
    ("Cleaning", "sparkles", "40.00"),
    ("Moving", "truck", "80.00"),
    ("Handyman", "wrench", "50.00"),
    ("Furniture Assembly", "hammer", "45.00"),
    ("Yard Work", "leaf", "35.00"),
    ("Delivery", "package", "25.00"),
]


class Command(BaseCommand):
    help = "Create or update demo guest users and the default task categories."

    def handle(self, *args, **options):
        User = get_user_model()

        for name, icon, base_price in CATEGORIES:
            _, created = Category.objects.get_or_create(
                slug=slugify(name),
                defaults={"name": name, "icon": icon, "base_price": base_price},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f"Created category '{name}'"))

        for role, cfg in GUESTS.items():
            u, created = User.objects.get_or_create(
                username=cfg["username"],
                defaults={"email": cfg["email"]},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f"Created user '{u.username}'"))
            else:
                self.stdout.write(f"User '{u.username}' already exists")

            # set (or reset) password to match the frontend
            u.set_password(cfg["password"])
            u.save(update_fields=["password"])

            # ensure profile with correct role
            prof, _ = Profile.objects.get_or_create(
                user=u, defaults={"role": role, "full_name": cfg["full_name"]}
            )
            if prof.role != role:
                prof.role = role
                prof.save(update_fields=["role"])
            if prof.is_tasker:
                TaskerProfile.objects.get_or_create(
                    profile=prof, defaults={"skills": ["Cleaning", "Furniture Assembly"]}
                )

            token, _ = Token.objects.get_or_create(user=u)
            self.stdout.write(f"  → role={role}, token={token.key}")

        self.stdout.write(self.style.SUCCESS("Guest users ready."))
