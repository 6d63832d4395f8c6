from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

User = get_user_model()

# Unregister the default admin first if it is already registered (idempotent).
try:
    admin.site.unregister(User)
except admin.sites.NotRegistered:
    pass


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """
    User list incl. ID, profile role (Profile.role) and admin flags.
    """
    list_display = (
        "id",
        "username",
        "email",
        "profile_role_display",
        "is_staff",
        "is_superuser",
        "is_active",
        "date_joined",
        "last_login",
    )
    list_select_related = ("profile",)
    ordering = ("-date_joined", "-id")
    search_fields = ("username", "email", "profile__role", "profile__full_name")
    list_filter = ("is_staff", "is_superuser", "is_active", "profile__role")

    def profile_role_display(self, obj):
        prof = getattr(obj, "profile", None)
        return getattr(prof, "role", "") or ""
    profile_role_display.short_description = "role"
    profile_role_display.admin_order_field = "profile__role"
