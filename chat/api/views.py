"""Chat API views.

List the caller's conversations (one per task that has an assigned tasker),
read a task's message thread and send messages to it. Reading the thread
marks the counterpart's messages as read. Clients follow new messages by
polling with `?after=<last id they hold>`, which returns only newer rows.
"""

import logging

from django.db.models import Count, F, IntegerField, OuterRef, Q, Subquery
from django.db.models.functions import Coalesce
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.models import Message
from tasks.lifecycle import TransitionConflict
from tasks.models import Task
from .permissions import IsTaskParticipant
from .serializers import ConversationSerializer, MessageCreateSerializer, MessageOutputSerializer

logger = logging.getLogger(__name__)


# ----------------------------- helpers (module-level) -----------------------------

def _conversations_queryset(user):
    last = Message.objects.filter(task=OuterRef("pk")).order_by("-created_at", "-id")
    unread = (
        Message.objects.filter(task=OuterRef("pk"), read=False)
        .exclude(sender=user)
        .order_by()
        .values("task")
        .annotate(c=Count("id"))
        .values("c")
    )
    return (
        Task.objects.filter(Q(customer=user) | Q(tasker=user), tasker__isnull=False)
        .select_related("customer__profile", "tasker__profile")
        .annotate(
            last_message=Subquery(last.values("content")[:1]),
            last_message_time=Subquery(last.values("created_at")[:1]),
            unread_count=Coalesce(Subquery(unread[:1], output_field=IntegerField()), 0),
        )
        .order_by(F("last_message_time").desc(nulls_last=True), "-id")
    )


def _parse_after(params):
    v = params.get("after")
    if not v:
        return None
    if not v.isdigit():
        raise ValidationError({"after": "Must be an integer."})
    return int(v)


# --------------------------------------- views ---------------------------------------

class ConversationListAPIView(generics.ListAPIView):
    """GET /api/conversations/ -> the caller's conversations, latest activity first."""

    serializer_class = ConversationSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return _conversations_queryset(self.request.user)


class TaskMessageListCreateAPIView(generics.ListCreateAPIView):
    """GET: the task's messages in ascending order (optionally only those after an id).
    POST: send a message (participants only, once the task has a tasker).
    """

    permission_classes = [IsAuthenticated, IsTaskParticipant]
    pagination_class = None

    def get_serializer_class(self):
        return MessageOutputSerializer if self.request.method == "GET" else MessageCreateSerializer

    def get_task(self):
        if not hasattr(self, "_task"):
            task = get_object_or_404(Task, pk=self.kwargs["pk"])
            self.check_object_permissions(self.request, task)
            self._task = task
        return self._task

    def get_queryset(self):
        qs = Message.objects.filter(task=self.get_task()).select_related("sender__profile")
        after = _parse_after(self.request.query_params)
        if after is not None:
            qs = qs.filter(id__gt=after)
        return qs.order_by("created_at", "id")

    def list(self, request, *args, **kwargs):
        """Return the thread, then mark the counterpart's messages up to it as read."""
        messages = list(self.get_queryset())
        data = MessageOutputSerializer(messages, many=True).data
        # Rows inserted after the snapshot stay unread until they are returned.
        seen_up_to = max((m.id for m in messages), default=_parse_after(request.query_params))
        if seen_up_to is not None:
            (
                Message.objects.filter(task=self.get_task(), read=False, id__lte=seen_up_to)
                .exclude(sender=request.user)
                .update(read=True)
            )
        return Response(data, status=status.HTTP_200_OK)

    def create(self, request, *args, **kwargs):
        task = self.get_task()
        if task.tasker_id is None:
            raise TransitionConflict("Messaging opens once the task has been assigned.")
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = Message.objects.create(
            task=task, sender=request.user, content=serializer.validated_data["content"]
        )
        logger.debug("Message %s posted to task %s by %s", message.pk, task.pk, request.user.pk)
        return Response(MessageOutputSerializer(message).data, status=status.HTTP_201_CREATED)
