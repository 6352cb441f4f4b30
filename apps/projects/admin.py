from django.contrib import admin

from apps.ledger.admin import CachedAggregateAdmin
from apps.ledger.services import LedgerService

from .models import Project, ProjectOwner


@admin.register(ProjectOwner)
class ProjectOwnerAdmin(CachedAggregateAdmin):
    aggregate_fields = ("paid_amount", "balance_amount")
    list_display = ("name", "company", "email", "phone", "total_project_value", "paid_amount", "balance_amount")
    search_fields = ("name", "company", "email", "phone")
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(Project)
class ProjectAdmin(CachedAggregateAdmin):
    aggregate_fields = ("paid_amount", "pending_amount", "current_balance")
    list_display = ("name", "owner", "status", "total_amount", "paid_amount", "pending_amount", "current_balance")
    list_filter = ("status",)
    search_fields = ("name", "owner__name")
    filter_horizontal = ("assigned_workers",)
    readonly_fields = ("created_at", "updated_at")

    def after_save(self, previous, obj):
        if previous is not None:
            LedgerService.post_project_update(previous, obj)
