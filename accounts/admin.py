from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import AuditLog, Role, User


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "level", "description")
    ordering = ("-level",)


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("username", "role", "worker", "project_owner", "is_active", "is_staff")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("username", "email", "first_name", "last_name")
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("Business role", {"fields": ("role", "phone", "worker", "project_owner")}),
    )
    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        ("Business role", {"fields": ("role", "worker", "project_owner")}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "user", "object_type", "object_id", "level", "category", "ip_address")
    list_filter = ("level", "category", "action")
    search_fields = ("action", "object_type", "object_id", "user__username")
    ordering = ("-created_at",)
    readonly_fields = (
        "user",
        "action",
        "object_type",
        "object_id",
        "level",
        "category",
        "ip_address",
        "metadata",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
