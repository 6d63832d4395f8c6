"""Chat API permissions."""

from rest_framework.permissions import BasePermission


class IsTaskParticipant(BasePermission):
    """Allow access only to the task's customer and its assigned tasker."""

    message = "Only the customer and the assigned tasker can access this conversation."

    def has_object_permission(self, request, view, obj):
        return obj.is_participant(request.user)
