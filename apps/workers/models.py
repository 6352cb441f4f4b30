from django.core.validators import MinValueValidator
from django.db import models

from apps.ledger.models import ZERO


class Worker(models.Model):
    class PaymentStatus(models.TextChoices):
        PAID = "paid", "Paid"
        PENDING = "pending", "Pending"
        PARTIAL = "partial", "Partial"

    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=50, unique=True)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=100, help_text="Trade, e.g. mason or electrician")
    address = models.TextField()
    daily_salary = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    monthly_salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    # Maintained by apps.ledger only.
    pending_salary = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PAID,
        editable=False,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["is_active"], name="worker_is_active_idx"),
            models.Index(fields=["pending_salary"], name="worker_pending_salary_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.role})"
