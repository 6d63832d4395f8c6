"""Tasks API views.

Browse open tasks and post new ones on the same endpoint, retrieve and edit a
single task, move it through its lifecycle, and list the caller's own tasks
(as customer) and jobs (as tasker). Categories are a public read-only list.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from applications.models import Application
from notifications.services import send_task_completed_email
from tasks.lifecycle import EDITABLE, TransitionConflict, change_status
from tasks.models import Category, Task
from .permissions import IsCustomerUser, IsTaskCustomer, IsTaskerUser
from .serializers import (
    CategorySerializer,
    TaskDetailSerializer,
    TaskOutputSerializer,
    TaskStatusSerializer,
    TaskWriteSerializer,
)

logger = logging.getLogger(__name__)


# ----------------------------- helpers (module-level) -----------------------------

def _base_queryset():
    return (
        Task.objects.all()
        .select_related("category", "customer__profile", "tasker__profile")
        .annotate(_application_count=Count("applications"))
    )


def _parse_decimal(params, key):
    raw = params.get(key)
    if raw in (None, ""):
        return None
    try:
        return Decimal(raw)
    except (InvalidOperation, TypeError):
        raise ValidationError({key: "Must be a number."})


def _apply_browse_filters(qs, params):
    """Search, category and price-range filters for the open-task listing."""
    search = params.get("search")
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))

    category = params.get("category")
    if category and category != "all":
        if category.isdigit():
            qs = qs.filter(category_id=int(category))
        else:
            qs = qs.filter(category__slug=category)

    min_price = _parse_decimal(params, "min_price")
    if min_price is not None:
        qs = qs.filter(price__gte=min_price)
    max_price = _parse_decimal(params, "max_price")
    if max_price is not None:
        qs = qs.filter(price__lte=max_price)

    ordering = params.get("ordering")
    if ordering:
        allowed = {"created_at", "-created_at", "price", "-price"}
        if ordering not in allowed:
            raise ValidationError(
                {"ordering": "Allowed values: created_at, -created_at, price, -price."}
            )
        return qs.order_by(ordering, "-id")
    return qs.order_by("-created_at", "-id")


def _apply_status_filter(qs, params):
    """Optional `status` filter; accepts a comma-separated list."""
    raw = params.get("status")
    if not raw:
        return qs
    wanted = [s.strip() for s in raw.split(",") if s.strip()]
    invalid = [s for s in wanted if s not in Task.Status.values]
    if invalid:
        raise ValidationError({"status": f"Unknown status: {', '.join(invalid)}."})
    return qs.filter(status__in=wanted)


def _require_editable(task):
    if task.status not in EDITABLE:
        raise TransitionConflict(f"A task that is {task.status} can no longer be edited.")


def _applied_task_ids(user):
    if not user or not user.is_authenticated:
        return set()
    return set(Application.objects.filter(tasker=user).values_list("task_id", flat=True))


# --------------------------------------- views ---------------------------------------

class TasksPagination(PageNumberPagination):
    """Default pagination for the task browser with an adjustable page size."""

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


class CategoryListAPIView(generics.ListAPIView):
    """GET /api/categories/ -> active categories ordered by name (public)."""

    serializer_class = CategorySerializer
    permission_classes = [AllowAny]
    pagination_class = None

    def get_queryset(self):
        return Category.objects.filter(active=True).order_by("name")


class TaskListCreateAPIView(generics.ListCreateAPIView):
    """GET: paginated list of open tasks with filters.
    POST: post a new task (customer-only).
    """

    pagination_class = TasksPagination

    def get_permissions(self):
        """Customer-only on POST, otherwise just authenticated."""
        if self.request.method == "POST":
            return [IsAuthenticated(), IsCustomerUser()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        return TaskOutputSerializer if self.request.method == "GET" else TaskWriteSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.method == "GET":
            context["applied_task_ids"] = _applied_task_ids(self.request.user)
        return context

    def get_queryset(self):
        qs = _base_queryset().filter(status=Task.Status.OPEN)
        return _apply_browse_filters(qs, self.request.query_params)

    def create(self, request, *args, **kwargs):
        """Validate and create a task, returning the full task payload."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = serializer.save()
        logger.info("Task %s posted by customer %s", task.pk, request.user.pk)
        task = _base_queryset().get(pk=task.pk)
        data = TaskDetailSerializer(task, context={"request": request}).data
        return Response(data, status=status.HTTP_201_CREATED)


class TaskDetailAPIView(generics.RetrieveUpdateAPIView):
    """GET: retrieve a task. PATCH: edit its details (customer, draft/open only)."""

    def get_permissions(self):
        if self.request.method in ("PATCH", "PUT"):
            return [IsAuthenticated(), IsTaskCustomer()]
        return [IsAuthenticated()]

    def get_queryset(self):
        return _base_queryset()

    def get_serializer_class(self):
        if self.request.method in ("PATCH", "PUT"):
            return TaskWriteSerializer
        return TaskDetailSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["applied_task_ids"] = _applied_task_ids(self.request.user)
        return context

    def update(self, request, *args, **kwargs):
        """Partially update task details and return the full task.

        The status check is repeated on the locked row right before the write,
        so an acceptance or cancellation that commits meanwhile wins with 409.
        """
        instance = self.get_object()
        _require_editable(instance)
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            locked = Task.objects.select_for_update().get(pk=instance.pk)
            _require_editable(locked)
            serializer.instance = locked
            self.perform_update(serializer)
        task = self.get_queryset().get(pk=instance.pk)
        return Response(TaskDetailSerializer(task, context=self.get_serializer_context()).data)


class TaskStatusAPIView(APIView):
    """POST /api/tasks/{id}/status/ {"status": ...} -> lifecycle transition."""

    permission_classes = [IsAuthenticated]

    def post(self, request, pk: int):
        task = get_object_or_404(Task, pk=pk)
        serializer = TaskStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["status"]

        task = change_status(task, request.user, target)
        if task.status == Task.Status.COMPLETED:
            send_task_completed_email(task.id)

        task = _base_queryset().get(pk=task.pk)
        return Response(
            TaskDetailSerializer(task, context={"request": request}).data,
            status=status.HTTP_200_OK,
        )


class MyTasksListAPIView(generics.ListAPIView):
    """GET /api/my-tasks/ -> tasks posted by the caller, newest first."""

    serializer_class = TaskOutputSerializer
    permission_classes = [IsAuthenticated, IsCustomerUser]
    pagination_class = None

    def get_queryset(self):
        qs = _base_queryset().filter(customer=self.request.user)
        return _apply_status_filter(qs, self.request.query_params).order_by("-created_at", "-id")


class MyJobsListAPIView(generics.ListAPIView):
    """GET /api/my-jobs/ -> tasks assigned to the caller as tasker, newest first."""

    serializer_class = TaskOutputSerializer
    permission_classes = [IsAuthenticated, IsTaskerUser]
    pagination_class = None

    def get_queryset(self):
        qs = _base_queryset().filter(tasker=self.request.user)
        return _apply_status_filter(qs, self.request.query_params).order_by("-created_at", "-id")
