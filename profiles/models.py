"""Profiles app models.

Defines the Profile model that extends the base user with contact data, a
marketplace role and notification preferences, the one-to-one TaskerProfile
extension for users who perform tasks, and ProfileDocument rows describing
uploaded verification files. String fields default to empty strings to avoid
nulls in API responses.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


def default_notification_preferences():
    return {"email": True, "sms": False, "push": True}


def default_availability():
    return {
        "monday": True,
        "tuesday": True,
        "wednesday": True,
        "thursday": True,
        "friday": True,
        "saturday": True,
        "sunday": False,
    }


class Profile(models.Model):
    """
    Profile for a single user.

    A user acting as `both` may post tasks and apply for them. Admins manage the
    platform and take no part in the marketplace.
    """

    class Role(models.TextChoices):
        CUSTOMER = "customer", "customer"
        TASKER = "tasker", "tasker"
        BOTH = "both", "both"
        ADMIN = "admin", "admin"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CUSTOMER)
    full_name = models.CharField(max_length=150, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    avatar_url = models.CharField(max_length=500, blank=True, default="")
    bio = models.TextField(blank=True, default="")
    location_city = models.CharField(max_length=100, blank=True, default="")
    location_state = models.CharField(max_length=100, blank=True, default="")
    location_country = models.CharField(max_length=100, blank=True, default="USA")
    date_of_birth = models.DateField(null=True, blank=True)
    notification_preferences = models.JSONField(default=default_notification_preferences, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_customer(self) -> bool:
        return self.role in (self.Role.CUSTOMER, self.Role.BOTH)

    @property
    def is_tasker(self) -> bool:
        return self.role in (self.Role.TASKER, self.Role.BOTH)

    @property
    def display_name(self) -> str:
        return self.full_name or self.user.get_full_name() or self.user.username

    def wants_email(self, category: str) -> bool:
        """Return True if email is enabled globally and not disabled for `category`."""
        prefs = self.notification_preferences or {}
        if not prefs.get("email"):
            return False
        scoped = prefs.get(category)
        if isinstance(scoped, dict) and scoped.get("email") is False:
            return False
        return True

    def __str__(self):
        """Readable representation for admin and debugging."""
        return f"Profile<{self.user_id}:{self.user.username} {self.role}>"


class TaskerProfile(models.Model):
    """Tasker-specific data; created on first save of the tasker form."""

    class VerificationStatus(models.TextChoices):
        PENDING = "pending", "pending"
        APPROVED = "approved", "approved"
        REJECTED = "rejected", "rejected"

    profile = models.OneToOneField(
        Profile,
        on_delete=models.CASCADE,
        related_name="tasker_profile",
    )
    bio = models.TextField(blank=True, default="")
    hourly_rate = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
    )
    years_experience = models.PositiveIntegerField(null=True, blank=True)
    skills = models.JSONField(default=list, blank=True)
    certifications = models.JSONField(default=list, blank=True)
    availability = models.JSONField(default=default_availability, blank=True)
    emergency_contact_name = models.CharField(max_length=150, blank=True, default="")
    emergency_contact_phone = models.CharField(max_length=50, blank=True, default="")

    verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    background_check_completed = models.BooleanField(default=False)

    rating = models.DecimalField(
        max_digits=3, decimal_places=2, default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    total_reviews = models.PositiveIntegerField(default=0)
    total_tasks = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"TaskerProfile<{self.profile.user_id} {self.verification_status}>"


class ProfileDocument(models.Model):
    """Metadata of a verification document stored under `documents/<user_id>/`."""

    class DocumentType(models.TextChoices):
        ID = "id", "Government ID"
        CERTIFICATION = "certification", "Certification"
        INSURANCE = "insurance", "Insurance"
        LICENSE = "license", "Professional License"
        OTHER = "other", "Other"

    profile = models.ForeignKey(
        Profile,
        on_delete=models.CASCADE,
        related_name="documents",
    )
    document_type = models.CharField(max_length=20, choices=DocumentType.choices)
    document_name = models.CharField(max_length=255)
    document_url = models.CharField(max_length=500)
    storage_path = models.CharField(max_length=500, blank=True, default="")
    verified = models.BooleanField(default=False)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-uploaded_at", "-id")

    def __str__(self):
        return f"ProfileDocument<{self.id} {self.document_type} {self.document_name}>"
