"""Tasks API permissions.

Request-level role checks and object-level ownership checks for task endpoints.
"""

from rest_framework.permissions import BasePermission

from common.roles import is_customer, is_tasker


class IsCustomerUser(BasePermission):
    """Allows access only to users whose role lets them post tasks (customer/both)."""

    message = "Only customers can post tasks."

    def has_permission(self, request, view):
        return is_customer(request.user)


class IsTaskerUser(BasePermission):
    """Allows access only to users whose role lets them work on tasks (tasker/both)."""

    message = "Only taskers can access this endpoint."

    def has_permission(self, request, view):
        return is_tasker(request.user)


class IsTaskCustomer(BasePermission):
    """Allows modifications only by the customer who posted the task."""

    message = "Only the customer who posted this task may modify it."

    def has_object_permission(self, request, view, obj):
        user = request.user
        return bool(user and user.is_authenticated and obj.customer_id == user.id)
