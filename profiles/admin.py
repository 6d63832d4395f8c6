from django.contrib import admin
from .models import Profile, ProfileDocument, TaskerProfile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """
    Profile list with its own ID + the related user ID.
    """
    list_display = ("id", "user_id_display", "user", "role", "full_name", "created_at")
    list_select_related = ("user",)
    search_fields = ("user__username", "user__email", "full_name", "role")
    list_filter = ("role", "created_at")
    ordering = ("-created_at", "-id")
    autocomplete_fields = ("user",)
    readonly_fields = ("created_at", "updated_at")

    def user_id_display(self, obj):
        return obj.user_id
    user_id_display.short_description = "user id"
    user_id_display.admin_order_field = "user__id"


@admin.register(TaskerProfile)
class TaskerProfileAdmin(admin.ModelAdmin):
    """
    Tasker verification happens here; rating and counters are computed.
    """
    list_display = (
        "id", "profile", "hourly_rate", "verification_status",
        "background_check_completed", "rating", "total_reviews", "total_tasks",
    )
    list_select_related = ("profile__user",)
    list_filter = ("verification_status", "background_check_completed")
    search_fields = ("profile__user__username", "profile__full_name")
    readonly_fields = ("rating", "total_reviews", "total_tasks", "created_at", "updated_at")


@admin.register(ProfileDocument)
class ProfileDocumentAdmin(admin.ModelAdmin):
    list_display = ("id", "profile", "document_type", "document_name", "verified", "uploaded_at")
    list_select_related = ("profile__user",)
    list_filter = ("document_type", "verified")
    search_fields = ("document_name", "profile__user__username")
    list_editable = ("verified",)
