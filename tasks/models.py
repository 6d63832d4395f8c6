"""Tasks app models.

Defines the static Category reference list and the Task work order. A task's
`tasker` is set exactly while the task is assigned, in progress or completed;
the check constraint keeps that invariant at the database level.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class Category(models.Model):
    """A type of task (cleaning, moving, ...). Managed through the admin."""

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    icon = models.CharField(max_length=100, blank=True, default="")
    base_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
    )
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name",)
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name


class Task(models.Model):
    """A unit of work posted by a customer and fulfilled by one tasker."""

    class Status(models.TextChoices):
        DRAFT = "draft", "draft"
        OPEN = "open", "open"
        ASSIGNED = "assigned", "assigned"
        IN_PROGRESS = "in_progress", "in_progress"
        COMPLETED = "completed", "completed"
        CANCELLED = "cancelled", "cancelled"

    ASSIGNED_STATES = (Status.ASSIGNED, Status.IN_PROGRESS, Status.COMPLETED)

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="tasks_posted",
    )
    tasker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="tasks_assigned",
        null=True,
        blank=True,
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        related_name="tasks",
        null=True,
        blank=True,
    )

    title = models.CharField(max_length=200)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)
    location_address = models.CharField(max_length=255)
    location_lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    location_lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    scheduled_for = models.DateTimeField(null=True, blank=True)
    duration_hours = models.PositiveIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1)]
    )
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status__in=["assigned", "in_progress", "completed"], tasker__isnull=False)
                    | (~Q(status__in=["assigned", "in_progress", "completed"]) & Q(tasker__isnull=True))
                ),
                name="task_tasker_set_iff_assigned",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
        ]

    def is_participant(self, user) -> bool:
        return bool(user and user.is_authenticated and user.id in (self.customer_id, self.tasker_id))

    def __str__(self) -> str:
        """Readable representation for admin and debugging."""
        return f"Task<{self.id} {self.title} {self.status}>"
