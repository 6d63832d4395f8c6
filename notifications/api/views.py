"""Email trigger endpoints.

POST endpoints that forward a JSON body to the email service. The domain
endpoints already send these emails on their own; the triggers exist for
operators re-sending a notification and are staff-only. Each returns
`{"success": true}`, or 500 with `{"error": ...}` when the body is unusable.
Delivery problems are not reported here: the email service logs and swallows them.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from notifications.services import (
    send_application_accepted_email,
    send_task_application_email,
    send_task_completed_email,
    send_welcome_email,
)

log = logging.getLogger(__name__)


class _EmailTriggerAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdminUser]
    label = "email"

    def send(self, data):
        raise NotImplementedError

    def post(self, request, *args, **kwargs):
        try:
            self.send(request.data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log.error("%s email API error: %s", self.label, e)
            return Response(
                {"error": "Failed to send email"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"success": True}, status=status.HTTP_200_OK)


class WelcomeEmailAPIView(_EmailTriggerAPIView):
    """POST /api/emails/welcome/ {"userId"}"""

    label = "Welcome"

    def send(self, data):
        send_welcome_email(int(data["userId"]))


class TaskApplicationEmailAPIView(_EmailTriggerAPIView):
    """POST /api/emails/task-application/ {"taskId", "applicantId", "message"?}"""

    label = "Application"

    def send(self, data):
        send_task_application_email(
            int(data["taskId"]), int(data["applicantId"]), data.get("message") or ""
        )


class ApplicationAcceptedEmailAPIView(_EmailTriggerAPIView):
    """POST /api/emails/application-accepted/ {"taskId", "taskerId"}"""

    label = "Acceptance"

    def send(self, data):
        send_application_accepted_email(int(data["taskId"]), int(data["taskerId"]))


class TaskCompletedEmailAPIView(_EmailTriggerAPIView):
    """POST /api/emails/task-completed/ {"taskId"}"""

    label = "Completion"

    def send(self, data):
        send_task_completed_email(int(data["taskId"]))
