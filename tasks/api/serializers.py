"""Tasks API serializers.

Input serializers for creating and editing tasks and for status changes, and
output serializers that embed category and participant summaries. The
customer is always taken from the request, never from the payload, and
`tasker` is never writable: it is only set by accepting an application.
"""

from rest_framework import serializers

from common.roles import user_profile
from tasks.lifecycle import allowed_targets
from tasks.models import Category, Task


# ------------------------------ helpers ------------------------------

def user_summary(user):
    """Small public representation of a user, or None."""
    if user is None:
        return None
    prof = user_profile(user)
    return {
        "id": user.id,
        "username": user.username,
        "full_name": prof.display_name if prof else user.username,
        "avatar_url": prof.avatar_url if prof else "",
    }


# ------------------------------ serializers ------------------------------

class CategorySerializer(serializers.ModelSerializer):
    """Read serializer for the category reference list."""

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "icon", "base_price"]


class TaskWriteSerializer(serializers.ModelSerializer):
    """Input serializer for creating a task or editing its details.

    `status` may only be `draft` or `open` on creation; it is rejected on edit.
    """

    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.filter(active=True),
        required=False,
        allow_null=True,
    )
    status = serializers.ChoiceField(
        choices=[Task.Status.DRAFT, Task.Status.OPEN],
        required=False,
    )
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    duration_hours = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    class Meta:
        model = Task
        fields = [
            "title",
            "description",
            "category",
            "location_address",
            "location_lat",
            "location_lng",
            "scheduled_for",
            "duration_hours",
            "price",
            "status",
        ]

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title may not be blank.")
        return value

    def validate(self, attrs):
        if self.instance is not None and "status" in attrs:
            raise serializers.ValidationError(
                {"status": "Use the status endpoint to change a task's status."}
            )
        return attrs

    def create(self, validated_data):
        """Create the task for the requesting customer."""
        request = self.context["request"]
        validated_data.setdefault("status", Task.Status.OPEN)
        return Task.objects.create(customer=request.user, **validated_data)

    def update(self, instance, validated_data):
        """Write only the edited columns; status and tasker are never touched here."""
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=[*validated_data, "updated_at"])
        return instance


class TaskOutputSerializer(serializers.ModelSerializer):
    """Read serializer returning a complete task representation."""

    category = CategorySerializer(read_only=True)
    customer = serializers.SerializerMethodField()
    tasker = serializers.SerializerMethodField()
    application_count = serializers.SerializerMethodField()
    has_applied = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = [
            "id",
            "title",
            "description",
            "category",
            "status",
            "location_address",
            "location_lat",
            "location_lng",
            "scheduled_for",
            "duration_hours",
            "price",
            "customer",
            "tasker",
            "application_count",
            "has_applied",
            "created_at",
            "updated_at",
        ]

    def get_customer(self, obj):
        return user_summary(obj.customer)

    def get_tasker(self, obj):
        return user_summary(obj.tasker)

    def get_application_count(self, obj):
        annotated = getattr(obj, "_application_count", None)
        if annotated is not None:
            return annotated
        return obj.applications.count()

    def get_has_applied(self, obj):
        applied = self.context.get("applied_task_ids")
        if applied is None:
            return False
        return obj.id in applied


class TaskDetailSerializer(TaskOutputSerializer):
    """Detail serializer that also tells the caller which status changes they may make."""

    allowed_status_changes = serializers.SerializerMethodField()

    class Meta(TaskOutputSerializer.Meta):
        fields = TaskOutputSerializer.Meta.fields + ["allowed_status_changes"]

    def get_allowed_status_changes(self, obj):
        request = self.context.get("request")
        return allowed_targets(obj, request.user) if request else []


class TaskStatusSerializer(serializers.Serializer):
    """Input serializer for a lifecycle transition."""

    status = serializers.CharField()
