from django.core.validators import MinValueValidator
from django.db import models

from apps.ledger.models import ZERO


class ProjectOwner(models.Model):
    name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=50, unique=True)
    address = models.TextField()
    company = models.CharField(max_length=150, blank=True)
    total_project_value = models.DecimalField(
        max_digits=14, decimal_places=2, default=ZERO, validators=[MinValueValidator(0)]
    )
    # Maintained by apps.ledger only.
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)
    balance_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def save(self, *args, **kwargs):
        self.email = (self.email or "").lower()
        self.balance_amount = self.total_project_value - self.paid_amount
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_project_value" in update_fields:
            kwargs["update_fields"] = {*update_fields, "balance_amount"}
        super().save(*args, **kwargs)

    def __str__(self):
        return self.company or self.name


class Project(models.Model):
    class Status(models.TextChoices):
        PLANNING = "planning", "Planning"
        IN_PROGRESS = "in-progress", "In progress"
        COMPLETED = "completed", "Completed"
        ON_HOLD = "on-hold", "On hold"

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(ProjectOwner, on_delete=models.PROTECT, related_name="projects")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PLANNING)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    # Maintained by apps.ledger only.
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)
    pending_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO, editable=False)
    assigned_workers = models.ManyToManyField("workers.Worker", blank=True, related_name="projects")
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="project_status_idx"),
            models.Index(fields=["current_balance"], name="project_balance_idx"),
        ]

    def save(self, *args, **kwargs):
        if self._state.adding:
            # Material purchases are debited from the contract value.
            self.current_balance = self.total_amount
        self.pending_amount = self.total_amount - self.paid_amount
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_amount" in update_fields:
            kwargs["update_fields"] = {*update_fields, "pending_amount"}
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name
