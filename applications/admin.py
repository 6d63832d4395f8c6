from django.contrib import admin
from .models import Application


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    """
    Applications per task; status changes go through the API so the
    task assignment stays consistent.
    """
    list_display = ("id", "task", "tasker", "proposed_rate", "status", "created_at")
    list_select_related = ("task", "tasker")
    list_filter = ("status", "created_at")
    search_fields = ("task__title", "tasker__username", "message")
    ordering = ("-created_at", "-id")
    readonly_fields = ("task", "tasker", "customer", "status", "created_at", "updated_at")
