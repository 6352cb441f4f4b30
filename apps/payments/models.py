from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.ledger.models import LedgerPostedModel
from apps.salaries.models import PaymentMethod


class Payment(LedgerPostedModel):
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    project_owner = models.ForeignKey(
        "projects.ProjectOwner",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    date = models.DateField(default=timezone.localdate)
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = models.CharField(max_length=120, blank=True)
    description = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    is_advance = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["project", "date"], name="payment_project_date_idx"),
            models.Index(fields=["project_owner", "date"], name="payment_owner_date_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.project_id and not self.project_owner_id:
            self.project_owner_id = self.project.owner_id
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.amount}@{self.date}"
