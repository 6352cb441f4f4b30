from django.contrib import admin
from django.db import transaction

from .services import LedgerService


class LedgerPostingAdmin(admin.ModelAdmin):
    """
    Admin edits of transaction records go through the same postings as the API.
    Subclasses set ``ledger_kind`` to material, attendance, salary or payment.
    """

    ledger_kind = ""
    ledger_readonly_fields = ("ledger_posted", "posted_amount", "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        return tuple(super().get_readonly_fields(request, obj)) + self.ledger_readonly_fields

    def _post(self, action: str):
        return getattr(LedgerService, f"post_{self.ledger_kind}_{action}")

    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            if change:
                previous = type(obj).objects.select_for_update().get(pk=obj.pk)
                super().save_model(request, obj, form, change)
                self._post("update")(previous, obj)
            else:
                super().save_model(request, obj, form, change)
                self._post("create")(obj)

    def delete_model(self, request, obj):
        with transaction.atomic():
            super().delete_model(request, obj)
            self._post("delete")(obj)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            self.delete_model(request, obj)


class CachedAggregateAdmin(admin.ModelAdmin):
    """
    Parent records whose ``aggregate_fields`` belong to the ledger. The form
    instance may be stale, so those fields are taken from the locked row.
    """

    aggregate_fields: tuple = ()

    def get_readonly_fields(self, request, obj=None):
        return tuple(super().get_readonly_fields(request, obj)) + self.aggregate_fields

    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            previous = None
            if change:
                previous = type(obj).objects.select_for_update().get(pk=obj.pk)
                for field in self.aggregate_fields:
                    setattr(obj, field, getattr(previous, field))
            super().save_model(request, obj, form, change)
            self.after_save(previous, obj)

    def after_save(self, previous, obj):
        pass
