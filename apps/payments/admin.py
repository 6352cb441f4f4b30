from django.contrib import admin

from apps.ledger.admin import LedgerPostingAdmin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(LedgerPostingAdmin):
    ledger_kind = "payment"
    list_display = ("date", "amount", "project", "project_owner", "payment_method", "is_advance", "ledger_posted")
    list_filter = ("payment_method", "is_advance", "ledger_posted")
    search_fields = ("reference", "description", "project__name", "project_owner__name")
    ordering = ("-date", "-id")
