"""Chat API serializers.

Message input/output serializers and the conversation summary, which is read
from a Task annotated with its last message and unread count.
"""

from rest_framework import serializers

from chat.models import Message
from common.roles import display_name, user_profile


class MessageOutputSerializer(serializers.ModelSerializer):
    """Read serializer for a message including a sender summary."""

    sender_name = serializers.SerializerMethodField()
    sender_avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = [
            "id",
            "task",
            "sender",
            "sender_name",
            "sender_avatar_url",
            "content",
            "read",
            "created_at",
        ]

    def get_sender_name(self, obj):
        return display_name(obj.sender)

    def get_sender_avatar_url(self, obj):
        prof = user_profile(obj.sender)
        return prof.avatar_url if prof else ""


class MessageCreateSerializer(serializers.Serializer):
    """Input serializer for a new message; content is trimmed and must not be blank."""

    content = serializers.CharField(max_length=5000, trim_whitespace=True)


class ConversationSerializer(serializers.Serializer):
    """One conversation per assigned task."""

    task_id = serializers.IntegerField(source="id")
    task_title = serializers.CharField(source="title")
    task_status = serializers.CharField(source="status")
    customer_id = serializers.IntegerField()
    tasker_id = serializers.IntegerField()
    customer_name = serializers.SerializerMethodField()
    tasker_name = serializers.SerializerMethodField()
    last_message = serializers.CharField(allow_null=True)
    last_message_time = serializers.DateTimeField(allow_null=True)
    unread_count = serializers.IntegerField()

    def get_customer_name(self, obj):
        return display_name(obj.customer)

    def get_tasker_name(self, obj):
        return display_name(obj.tasker)
