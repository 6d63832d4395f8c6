"""Applications app models.

An Application is a tasker's bid on an open task. A tasker applies at most
once per task, and at most one application per task can be accepted.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from tasks.models import Task


class Application(models.Model):
    """Represents a tasker's bid to perform a specific task."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        ACCEPTED = "accepted", "accepted"
        REJECTED = "rejected", "rejected"
        WITHDRAWN = "withdrawn", "withdrawn"

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="applications")
    tasker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="applications_sent",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="applications_received",
    )
    message = models.TextField(blank=True, default="")
    proposed_rate = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        constraints = [
            models.UniqueConstraint(
                fields=["task", "tasker"],
                name="unique_application_per_task_and_tasker",
            ),
            models.UniqueConstraint(
                fields=["task"],
                condition=Q(status="accepted"),
                name="one_accepted_application_per_task",
            ),
        ]

    def __str__(self) -> str:
        """Readable representation for admin and debugging."""
        return f"Application<{self.id} task={self.task_id} tasker={self.tasker_id} {self.status}>"
