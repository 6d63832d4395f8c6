"""Applications API permissions."""

from rest_framework.permissions import BasePermission


class IsApplicationParticipant(BasePermission):
    """Allow reading an application only to its tasker or the task's customer."""

    message = "You are not part of this application."

    def has_object_permission(self, request, view, obj):
        user = request.user
        return bool(
            user and user.is_authenticated and user.id in (obj.tasker_id, obj.customer_id)
        )
