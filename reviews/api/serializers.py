"""Reviews API serializers.

Provide serializers for creating a review, returning review data, and
partially updating it. Enforces the eligibility rules: the task must be
completed, the reviewer must take part in it, the reviewed user must be the
other participant, and each (task, reviewer, reviewed) pair is reviewed once.
"""

from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied

from common.roles import display_name
from reviews.models import Review
from tasks.models import Task


class ReviewCreateSerializer(serializers.Serializer):
    """Input serializer for creating a new review."""

    task = serializers.IntegerField(required=True)
    reviewed = serializers.IntegerField(required=True)
    rating = serializers.IntegerField(min_value=1, max_value=5, required=True)
    comment = serializers.CharField(allow_blank=True, required=False, default="", max_length=2000)

    def validate_task(self, value):
        """Ensure the task exists and store it in the serializer context."""
        try:
            task = Task.objects.get(id=value)
        except Task.DoesNotExist:
            raise serializers.ValidationError("Task not found.")
        self.context["task_obj"] = task
        return value

    def validate(self, attrs):
        """Check completion, participation, counterpart and uniqueness."""
        request = self.context.get("request")
        if not request or not request.user.is_authenticated:
            # Fallback; IsAuthenticated on the view is the primary guard.
            raise serializers.ValidationError("Authentication required.")

        task = self.context["task_obj"]
        reviewer = request.user

        if task.status != Task.Status.COMPLETED:
            raise serializers.ValidationError(
                {"task": "Reviews can only be submitted for completed tasks."}
            )

        if reviewer.id not in (task.customer_id, task.tasker_id):
            raise PermissionDenied("Only the customer and the assigned tasker can review this task.")

        counterpart = task.tasker_id if reviewer.id == task.customer_id else task.customer_id
        if attrs["reviewed"] != counterpart:
            raise serializers.ValidationError(
                {"reviewed": "You can only review the other participant of this task."}
            )

        exists = Review.objects.filter(
            task=task, reviewer=reviewer, reviewed_id=counterpart
        ).exists()
        if exists:
            raise serializers.ValidationError(
                {"non_field_errors": ["You have already reviewed this task."]}
            )
        return attrs

    def create(self, validated_data):
        """Create and return the review instance."""
        return Review.objects.create(
            task=self.context["task_obj"],
            reviewer=self.context["request"].user,
            reviewed_id=validated_data["reviewed"],
            rating=validated_data["rating"],
            comment=(validated_data.get("comment") or "").strip(),
        )


class ReviewOutputSerializer(serializers.ModelSerializer):
    """Read serializer for returning a review."""

    reviewer_name = serializers.SerializerMethodField()
    reviewed_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            "id",
            "task",
            "reviewer",
            "reviewer_name",
            "reviewed",
            "reviewed_name",
            "rating",
            "comment",
            "response",
            "created_at",
            "updated_at",
        ]

    def get_reviewer_name(self, obj):
        return display_name(obj.reviewer)

    def get_reviewed_name(self, obj):
        return display_name(obj.reviewed)


class ReviewPatchSerializer(serializers.ModelSerializer):
    """Patch serializer for the reviewer's rating/comment."""

    rating = serializers.IntegerField(min_value=1, max_value=5, required=False)

    class Meta:
        model = Review
        fields = ["rating", "comment"]


class ReviewResponseSerializer(serializers.ModelSerializer):
    """Patch serializer for the reviewed user's one-time response."""

    response = serializers.CharField(allow_blank=False, max_length=2000)

    class Meta:
        model = Review
        fields = ["response"]

    def validate_response(self, value):
        if self.instance is not None and self.instance.response:
            raise serializers.ValidationError("You have already responded to this review.")
        return value.strip()
