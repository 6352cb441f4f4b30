from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.ledger.models import ZERO, LedgerPostedModel


class Material(LedgerPostedModel):
    name = models.CharField(max_length=150)
    category = models.CharField(max_length=100)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)
    quality = models.CharField(max_length=100, blank=True)
    supplier = models.CharField(max_length=150, blank=True)
    project = models.ForeignKey("projects.Project", on_delete=models.PROTECT, related_name="materials")
    purchase_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-purchase_date", "-id"]
        indexes = [
            models.Index(fields=["project", "purchase_date"], name="material_project_date_idx"),
        ]

    def save(self, *args, **kwargs):
        self.total_cost = (Decimal(self.quantity) * Decimal(self.unit_price)).quantize(Decimal("0.01"))
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and {"quantity", "unit_price"} & set(update_fields):
            kwargs["update_fields"] = {*update_fields, "total_cost"}
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} x{self.quantity}"
