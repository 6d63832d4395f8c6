"""Applications API serializers.

Input serializer for applying to a task and output serializers for the
customer's and the tasker's view of an application. The task comes from the
URL and the tasker from the request; neither is read from the payload.
"""

from rest_framework import serializers

from applications.models import Application
from tasks.api.serializers import user_summary
from tasks.models import Task


class ApplicationCreateSerializer(serializers.Serializer):
    """Input serializer for a new application.

    Validates:
    - the task is open
    - the applicant is not the customer of the task
    - the applicant has not applied before
    `proposed_rate` defaults to the task price.
    """

    message = serializers.CharField(allow_blank=True, required=False, default="", max_length=2000)
    proposed_rate = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )

    def validate(self, attrs):
        request = self.context["request"]
        task: Task = self.context["task"]
        if task.status != Task.Status.OPEN:
            raise serializers.ValidationError({"task": "This task is not open for applications."})
        if task.customer_id == request.user.id:
            raise serializers.ValidationError({"task": "You cannot apply to your own task."})
        if Application.objects.filter(task=task, tasker=request.user).exists():
            raise serializers.ValidationError(
                {"non_field_errors": ["You have already applied for this task."]}
            )
        return attrs

    def create(self, validated_data):
        task = self.context["task"]
        rate = validated_data.get("proposed_rate")
        return Application.objects.create(
            task=task,
            tasker=self.context["request"].user,
            customer_id=task.customer_id,
            message=(validated_data.get("message") or "").strip(),
            proposed_rate=rate if rate is not None else task.price,
        )


class ApplicationOutputSerializer(serializers.ModelSerializer):
    """Read serializer with tasker and task summaries."""

    tasker = serializers.SerializerMethodField()
    task = serializers.SerializerMethodField()

    class Meta:
        model = Application
        fields = [
            "id",
            "task",
            "tasker",
            "customer",
            "message",
            "proposed_rate",
            "status",
            "created_at",
            "updated_at",
        ]

    def get_tasker(self, obj):
        return user_summary(obj.tasker)

    def get_task(self, obj):
        task = obj.task
        return {
            "id": task.id,
            "title": task.title,
            "price": str(task.price),
            "status": task.status,
        }
