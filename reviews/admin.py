from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    """
    Moderation view: hiding a review (is_visible) removes it from
    listings and from the rating aggregates on the next refresh.
    """
    list_display = ("id", "task", "reviewer", "reviewed", "rating", "is_visible", "created_at")
    list_select_related = ("task", "reviewer", "reviewed")
    list_filter = ("rating", "is_visible", "created_at")
    list_editable = ("is_visible",)
    search_fields = ("comment", "reviewer__username", "reviewed__username", "task__title")
    ordering = ("-created_at", "-id")
    readonly_fields = ("created_at", "updated_at")
