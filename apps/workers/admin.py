from django.contrib import admin

from apps.ledger.admin import CachedAggregateAdmin

from .models import Worker


@admin.register(Worker)
class WorkerAdmin(CachedAggregateAdmin):
    aggregate_fields = ("pending_salary", "payment_status")
    list_display = ("name", "phone", "role", "daily_salary", "pending_salary", "payment_status", "is_active")
    list_filter = ("payment_status", "is_active", "role")
    search_fields = ("name", "phone", "email")
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")
