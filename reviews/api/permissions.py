"""Reviews API permissions.

Contains object-level permissions for review endpoints.
"""

from rest_framework.permissions import BasePermission


class IsReviewOwner(BasePermission):
    """Allow deletion only by the review owner (reviewer)."""

    message = "Only the review owner may modify this review."

    def has_object_permission(self, request, view, obj):
        user = request.user
        return bool(user and user.is_authenticated and obj.reviewer_id == user.id)


class IsReviewParticipant(BasePermission):
    """Allow updates by the reviewer (rating/comment) or the reviewed user (response)."""

    message = "Only the reviewer or the reviewed user may modify this review."

    def has_object_permission(self, request, view, obj):
        user = request.user
        return bool(
            user and user.is_authenticated and user.id in (obj.reviewer_id, obj.reviewed_id)
        )
