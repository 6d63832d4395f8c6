"""Task status lifecycle.

The allowed transitions and the party allowed to trigger each one are listed
in TRANSITIONS. Every write is a conditional update on the status the caller
saw, so a concurrent writer that got there first makes the second one fail
with 409 instead of silently overwriting it.

`open -> assigned` is not reachable through `change_status`; it only happens
through application acceptance, which calls `assign_tasker` inside its own
transaction.
"""

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied, ValidationError

from profiles.models import TaskerProfile
from tasks.models import Task

logger = logging.getLogger(__name__)

CUSTOMER = "customer"
TASKER = "tasker"

S = Task.Status

TRANSITIONS = {
    (S.DRAFT, S.OPEN): {CUSTOMER},
    (S.DRAFT, S.CANCELLED): {CUSTOMER},
    (S.OPEN, S.CANCELLED): {CUSTOMER},
    (S.ASSIGNED, S.IN_PROGRESS): {TASKER},
    (S.IN_PROGRESS, S.COMPLETED): {TASKER, CUSTOMER},
}

TERMINAL = {S.COMPLETED, S.CANCELLED}
EDITABLE = {S.DRAFT, S.OPEN}


class TransitionConflict(APIException):
    """The requested change does not fit the task's current state."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The task is not in a state that allows this action."
    default_code = "conflict"


def actor_role(task: Task, user) -> str | None:
    if not user or not user.is_authenticated:
        return None
    if user.id == task.customer_id:
        return CUSTOMER
    if task.tasker_id is not None and user.id == task.tasker_id:
        return TASKER
    return None


def allowed_targets(task: Task, user) -> list[str]:
    """Statuses `user` may move `task` to right now (used by the detail view)."""
    role = actor_role(task, user)
    if role is None:
        return []
    return [
        target
        for (source, target), roles in TRANSITIONS.items()
        if source == task.status and role in roles
    ]


def _conditional_update(task: Task, expected: str, conflict_detail=None, **changes) -> None:
    updated = Task.objects.filter(pk=task.pk, status=expected).update(
        updated_at=timezone.now(), **changes
    )
    if not updated:
        raise TransitionConflict(
            conflict_detail or "The task was changed by someone else. Reload and try again."
        )


def change_status(task: Task, user, target: str) -> Task:
    """Move `task` to `target` on behalf of `user` and return the fresh row."""
    if target not in S.values:
        raise ValidationError({"status": f"'{target}' is not a valid status."})

    role = actor_role(task, user)
    if role is None:
        raise PermissionDenied("Only the customer or the assigned tasker may change this task.")

    source = task.status
    if source in TERMINAL:
        raise TransitionConflict(f"The task is already {source}.")
    roles = TRANSITIONS.get((source, target))
    if roles is None:
        if target == S.ASSIGNED:
            raise TransitionConflict("A task is assigned by accepting an application.")
        raise TransitionConflict(f"Cannot change status from '{source}' to '{target}'.")
    if role not in roles:
        raise PermissionDenied(f"The {role} may not set this task to '{target}'.")

    with transaction.atomic():
        _conditional_update(task, source, status=target)
        if target == S.COMPLETED:
            TaskerProfile.objects.filter(profile__user_id=task.tasker_id).update(
                total_tasks=F("total_tasks") + 1
            )

    logger.info("Task %s: %s -> %s by %s %s", task.pk, source, target, role, user.pk)
    task.refresh_from_db()
    return task


def assign_tasker(task: Task, tasker) -> None:
    """Assign `tasker` to an open task. Call inside a transaction."""
    if task.status != S.OPEN:
        raise TransitionConflict("Task is no longer open.")
    _conditional_update(
        task, S.OPEN, "Task is no longer open.", status=S.ASSIGNED, tasker=tasker
    )
    task.status = S.ASSIGNED
    task.tasker = tasker
