"""Applications API views.

Apply for a task and list a task's applications on the same endpoint, list
the caller's own applications, and accept, reject or withdraw a single
application. The state changes themselves live in `applications.services`.
"""

from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from applications.models import Application
from applications.services import accept_application, reject_application, withdraw_application
from notifications.services import send_application_accepted_email, send_task_application_email
from tasks.api.permissions import IsTaskerUser
from tasks.models import Task
from .permissions import IsApplicationParticipant
from .serializers import ApplicationCreateSerializer, ApplicationOutputSerializer


# ----------------------------- helpers (module-level) -----------------------------

def _with_summaries(qs):
    return qs.select_related("task", "tasker__profile").order_by("-created_at", "-id")


def _apply_status_filter(qs, params):
    v = params.get("status")
    if v:
        if v not in Application.Status.values:
            raise ValidationError(
                {"status": "Allowed values: pending, accepted, rejected, withdrawn."}
            )
        qs = qs.filter(status=v)
    return qs


# --------------------------------------- views ---------------------------------------

class TaskApplicationListCreateAPIView(generics.ListCreateAPIView):
    """GET: the task's customer sees every application, anyone else only their own.
    POST: apply for the task (tasker-only).
    """

    pagination_class = None

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsTaskerUser()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.request.method == "GET":
            return ApplicationOutputSerializer
        return ApplicationCreateSerializer

    def get_task(self):
        if not hasattr(self, "_task"):
            self._task = get_object_or_404(Task, pk=self.kwargs["pk"])
        return self._task

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["task"] = self.get_task()
        return context

    def get_queryset(self):
        task = self.get_task()
        qs = Application.objects.filter(task=task)
        if task.customer_id != self.request.user.id:
            qs = qs.filter(tasker=self.request.user)
        return _apply_status_filter(_with_summaries(qs), self.request.query_params)

    def create(self, request, *args, **kwargs):
        """Validate and create the application, then notify the customer."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                application = serializer.save()
        except IntegrityError:
            raise ValidationError({"non_field_errors": ["You have already applied for this task."]})

        send_task_application_email(application.task_id, request.user.id, application.message)
        return Response(
            ApplicationOutputSerializer(application).data, status=status.HTTP_201_CREATED
        )


class MyApplicationListAPIView(generics.ListAPIView):
    """GET /api/applications/ -> the caller's own applications (optional status filter)."""

    serializer_class = ApplicationOutputSerializer
    permission_classes = [IsAuthenticated, IsTaskerUser]
    pagination_class = None

    def get_queryset(self):
        qs = _with_summaries(Application.objects.filter(tasker=self.request.user))
        return _apply_status_filter(qs, self.request.query_params)


class ApplicationDetailAPIView(generics.RetrieveAPIView):
    """GET /api/applications/{id}/ -> single application (tasker or customer only)."""

    serializer_class = ApplicationOutputSerializer
    permission_classes = [IsAuthenticated, IsApplicationParticipant]

    def get_queryset(self):
        return _with_summaries(Application.objects.all())


class _ApplicationActionAPIView(APIView):
    """Base for POST-only actions that return the updated application."""

    permission_classes = [IsAuthenticated]

    def perform_action(self, application_id, user):
        raise NotImplementedError

    def after_action(self, application):
        pass

    def post(self, request, pk: int):
        get_object_or_404(Application, pk=pk)
        application = self.perform_action(pk, request.user)
        self.after_action(application)
        application = _with_summaries(Application.objects.all()).get(pk=application.pk)
        return Response(ApplicationOutputSerializer(application).data, status=status.HTTP_200_OK)


class ApplicationAcceptAPIView(_ApplicationActionAPIView):
    """POST /api/applications/{id}/accept/ -> accept and assign the task (customer-only)."""

    def perform_action(self, application_id, user):
        return accept_application(application_id, user)

    def after_action(self, application):
        send_application_accepted_email(application.task_id, application.tasker_id)


class ApplicationRejectAPIView(_ApplicationActionAPIView):
    """POST /api/applications/{id}/reject/ -> reject a pending application (customer-only)."""

    def perform_action(self, application_id, user):
        return reject_application(application_id, user)


class ApplicationWithdrawAPIView(_ApplicationActionAPIView):
    """POST /api/applications/{id}/withdraw/ -> withdraw own pending application."""

    def perform_action(self, application_id, user):
        return withdraw_application(application_id, user)
