"""Transactional email.

Every public function here is best effort: it looks up what it needs, checks
the recipient's notification preferences, renders `emails/<template>.html`
(plus the `.txt` twin when present) and sends through Django's configured
email backend. Failures are logged and reported as `False`; they never
propagate to the caller.
"""

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string

from common.roles import display_name, user_profile
from tasks.models import Task

log = logging.getLogger(__name__)

User = get_user_model()

APPLICATION_UPDATE = "application_update"
TASK_STATUS = "task_status"


def send_email(*, to, subject, template, **ctx) -> bool:
    try:
        if not to:
            log.warning("send_email: missing recipient")
            return False
        recipients = [to] if isinstance(to, str) else list(to)
        ctx.setdefault("frontend_url", settings.FRONTEND_URL)
        html = render_to_string(f"emails/{template}.html", ctx)
        try:
            txt = render_to_string(f"emails/{template}.txt", ctx)
        except TemplateDoesNotExist:
            txt = ""

        if getattr(settings, "MAIL_SUPPRESS_SEND", False):
            log.info("[MAIL_SUPPRESS_SEND=1] would send: %s | %s", recipients, subject)
            return True

        msg = EmailMultiAlternatives(
            subject=subject,
            body=txt,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=recipients,
        )
        msg.attach_alternative(html, "text/html")
        msg.send()
        log.info("Email sent to %s | subject=%s", recipients, subject)
        return True
    except Exception as e:
        log.exception("send_email failed: %s", e)
        return False


def _wants(user, category: str) -> bool:
    prof = user_profile(user)
    if prof is None:
        return False
    if not prof.wants_email(category):
        log.info("Email '%s' skipped for user %s (preferences)", category, user.pk)
        return False
    return True


def _task_context(task: Task, recipient, notification_type: str, **extra) -> dict:
    ctx = {
        "recipient_name": display_name(recipient),
        "task_title": task.title,
        "task_location": task.location_address,
        "task_price": task.price,
        "task_id": task.id,
        "task_url": f"{settings.FRONTEND_URL}/tasks/{task.id}",
        "notification_type": notification_type,
    }
    ctx.update(extra)
    return ctx


def send_welcome_email(user_id: int) -> bool:
    """Greet a newly registered user; sent regardless of preferences."""
    try:
        user = User.objects.select_related("profile").get(pk=user_id)
    except User.DoesNotExist:
        log.warning("send_welcome_email: user %s not found", user_id)
        return False
    prof = user_profile(user)
    return send_email(
        to=user.email,
        subject="Welcome to TaskTap!",
        template="welcome",
        name=display_name(user),
        role=prof.role if prof else "",
    )


def send_task_application_email(task_id: int, applicant_id: int, message: str = "") -> bool:
    """Tell the task's customer that a tasker applied."""
    task = Task.objects.select_related("customer__profile").filter(pk=task_id).first()
    applicant = User.objects.select_related("profile").filter(pk=applicant_id).first()
    if task is None or applicant is None:
        log.warning("send_task_application_email: task %s or applicant %s missing", task_id, applicant_id)
        return False
    if not _wants(task.customer, APPLICATION_UPDATE):
        return False
    return send_email(
        to=task.customer.email,
        subject=f'New application for "{task.title}"',
        template="task_notification",
        **_task_context(
            task,
            task.customer,
            "new-application",
            applicant_name=display_name(applicant),
            message=message or "",
        ),
    )


def send_application_accepted_email(task_id: int, tasker_id: int) -> bool:
    """Tell the tasker that their application was accepted."""
    task = Task.objects.filter(pk=task_id).first()
    tasker = User.objects.select_related("profile").filter(pk=tasker_id).first()
    if task is None or tasker is None:
        log.warning("send_application_accepted_email: task %s or tasker %s missing", task_id, tasker_id)
        return False
    if not _wants(tasker, APPLICATION_UPDATE):
        return False
    return send_email(
        to=tasker.email,
        subject="Your application was accepted!",
        template="task_notification",
        **_task_context(task, tasker, "application-accepted"),
    )


def send_task_completed_email(task_id: int) -> int:
    """Tell both parties the task is completed. Returns the number of emails sent."""
    task = (
        Task.objects.select_related("customer__profile", "tasker__profile")
        .filter(pk=task_id)
        .first()
    )
    if task is None or task.tasker is None:
        log.warning("send_task_completed_email: task %s missing or unassigned", task_id)
        return 0

    sent = 0
    for recipient in (task.customer, task.tasker):
        if not _wants(recipient, TASK_STATUS):
            continue
        if send_email(
            to=recipient.email,
            subject=f'Task "{task.title}" completed!',
            template="task_notification",
            **_task_context(task, recipient, "task-completed"),
        ):
            sent += 1
    return sent
