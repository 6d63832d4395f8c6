from django.contrib import admin
from django.db.models import Count
from django.utils.html import format_html
from .models import Category, Task


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    """
    Category reference list; slug is prefilled from the name.
    """
    list_display = ("id", "name", "slug", "base_price", "active", "created_at")
    list_filter = ("active",)
    search_fields = ("name", "slug", "description")
    prepopulated_fields = {"slug": ("name",)}
    ordering = ("name",)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """
    Task overview:
    - List: ID, title, status (badge), customer, tasker, price, applications, created
    - Filter: status, category, created (date hierarchy)
    - Search: title, customer username, tasker username
    - Readonly: tasker and timestamps; assignment only happens through acceptance
    """
    list_display = (
        "id",
        "title",
        "status_badge",
        "customer_username",
        "tasker_username",
        "price",
        "application_count",
        "created_at",
    )
    list_select_related = ("customer", "tasker", "category")
    list_filter = ("status", "category", "created_at")
    date_hierarchy = "created_at"
    ordering = ("-created_at", "-id")
    search_fields = ("title", "customer__username", "tasker__username")
    readonly_fields = ("tasker", "created_at", "updated_at")
    autocomplete_fields = ("customer",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.annotate(_application_count=Count("applications"))

    def status_badge(self, obj):
        color = {
            "draft": "#9ca3af",
            "open": "#a855f7",
            "assigned": "#f59e0b",
            "in_progress": "#0ea5e9",
            "completed": "#22c55e",
            "cancelled": "#ef4444",
        }.get(obj.status, "#9ca3af")
        return format_html(
            '<span style="display:inline-block;padding:2px 8px;border-radius:999px;'
            'font-size:12px;font-weight:600;color:#fff;background:{};">{}</span>',
            color,
            obj.status,
        )
    status_badge.short_description = "status"
    status_badge.admin_order_field = "status"

    def customer_username(self, obj):
        return obj.customer.username if obj.customer_id else ""
    customer_username.short_description = "customer"

    def tasker_username(self, obj):
        return obj.tasker.username if obj.tasker_id else ""
    tasker_username.short_description = "tasker"

    def application_count(self, obj):
        return getattr(obj, "_application_count", 0)
    application_count.short_description = "applications"
    application_count.admin_order_field = "_application_count"
