"""Chat app models.

A Message belongs to one task's conversation between its customer and its
assigned tasker. Messages are never edited or deleted; only the read flag
changes.
"""

from django.conf import settings
from django.db import models

from tasks.models import Task


class Message(models.Model):
    """A single chat entry within a task's conversation."""

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="messages_sent",
    )
    content = models.TextField()
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("created_at", "id")
        indexes = [
            models.Index(fields=["task", "id"]),
        ]

    def __str__(self) -> str:
        """Readable representation for admin and debugging."""
        return f"Message<{self.id} task={self.task_id} from={self.sender_id}>"
