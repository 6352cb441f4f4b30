from django.contrib import admin

from apps.ledger.admin import LedgerPostingAdmin

from .models import Attendance


@admin.register(Attendance)
class AttendanceAdmin(LedgerPostingAdmin):
    ledger_kind = "attendance"
    list_display = ("date", "worker", "project", "status", "overtime_hours", "earned_amount", "ledger_posted")
    list_filter = ("status", "date", "ledger_posted")
    search_fields = ("worker__name", "project__name", "notes")
    ordering = ("-date", "-id")
    readonly_fields = ("earned_amount",)
