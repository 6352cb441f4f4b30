from django.contrib import admin

from apps.ledger.admin import LedgerPostingAdmin

from .models import Material


@admin.register(Material)
class MaterialAdmin(LedgerPostingAdmin):
    ledger_kind = "material"
    list_display = ("name", "category", "quantity", "unit_price", "total_cost", "project", "purchase_date")
    list_filter = ("category", "ledger_posted")
    search_fields = ("name", "supplier", "project__name")
    ordering = ("-purchase_date", "-id")
    readonly_fields = ("total_cost",)
