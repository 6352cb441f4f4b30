from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.ledger.models import LedgerPostedModel


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    BANK = "bank", "Bank transfer"
    CHEQUE = "cheque", "Cheque"
    UPI = "upi", "UPI"


class Salary(LedgerPostedModel):
    worker = models.ForeignKey("workers.Worker", on_delete=models.PROTECT, related_name="salaries")
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="salaries",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    date = models.DateField(default=timezone.localdate)
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    period_start = models.DateField(null=True, blank=True)
    period_end = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["worker", "date"], name="salary_worker_date_idx"),
        ]

    def __str__(self):
        return f"{self.worker_id}:{self.amount}@{self.date}"
