from django.contrib import admin

from apps.ledger.admin import LedgerPostingAdmin

from .models import Salary


@admin.register(Salary)
class SalaryAdmin(LedgerPostingAdmin):
    ledger_kind = "salary"
    list_display = ("date", "worker", "amount", "posted_amount", "project", "payment_method")
    list_filter = ("payment_method", "ledger_posted")
    search_fields = ("worker__name", "notes")
    ordering = ("-date", "-id")
