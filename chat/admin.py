from django.contrib import admin
from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "task", "sender", "short_content", "read", "created_at")
    list_select_related = ("task", "sender")
    list_filter = ("read", "created_at")
    search_fields = ("content", "task__title", "sender__username")
    ordering = ("-created_at", "-id")

    def short_content(self, obj):
        return obj.content[:60]
    short_content.short_description = "content"
