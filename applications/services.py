"""Application state changes.

Accepting an application is one transaction: the task row is locked, the task
is assigned with a conditional update that requires it to still be open, the
chosen application is accepted and every other pending application for the
task is rejected. If any step fails nothing is written, and a second
acceptance for the same task fails once the first has committed.
"""

import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from applications.models import Application
from tasks.lifecycle import TransitionConflict, assign_tasker
from tasks.models import Task

logger = logging.getLogger(__name__)


def _require_pending(application: Application):
    if application.status != Application.Status.PENDING:
        raise TransitionConflict(f"The application is already {application.status}.")


def accept_application(application_id: int, user) -> Application:
    """Accept one pending application and assign its tasker to the task."""
    with transaction.atomic():
        application = Application.objects.select_for_update().get(pk=application_id)
        task = Task.objects.select_for_update().get(pk=application.task_id)

        if task.customer_id != user.id:
            raise PermissionDenied("Only the customer who posted this task may accept applications.")
        _require_pending(application)

        assign_tasker(task, application.tasker)

        now = timezone.now()
        Application.objects.filter(pk=application.pk).update(
            status=Application.Status.ACCEPTED, updated_at=now
        )
        rejected = (
            Application.objects.filter(task_id=task.pk, status=Application.Status.PENDING)
            .exclude(pk=application.pk)
            .update(status=Application.Status.REJECTED, updated_at=now)
        )

    logger.info(
        "Application %s accepted for task %s; tasker %s assigned, %s sibling(s) rejected",
        application.pk, task.pk, application.tasker_id, rejected,
    )
    application.refresh_from_db()
    return application


def reject_application(application_id: int, user) -> Application:
    """Reject a single pending application of an open task."""
    with transaction.atomic():
        application = Application.objects.select_for_update().select_related("task").get(
            pk=application_id
        )
        if application.task.customer_id != user.id:
            raise PermissionDenied("Only the customer who posted this task may reject applications.")
        _require_pending(application)
        if application.task.status != Task.Status.OPEN:
            raise TransitionConflict("Task is no longer open.")
        application.status = Application.Status.REJECTED
        application.save(update_fields=["status", "updated_at"])

    logger.info("Application %s rejected for task %s", application.pk, application.task_id)
    return application


def withdraw_application(application_id: int, user) -> Application:
    """Withdraw the caller's own pending application."""
    with transaction.atomic():
        application = Application.objects.select_for_update().get(pk=application_id)
        if application.tasker_id != user.id:
            raise PermissionDenied("Only the applicant may withdraw this application.")
        _require_pending(application)
        application.status = Application.Status.WITHDRAWN
        application.save(update_fields=["status", "updated_at"])

    logger.info("Application %s withdrawn by tasker %s", application.pk, user.pk)
    return application
