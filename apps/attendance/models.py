from django.core.validators import MinValueValidator
from django.db import models

from apps.ledger.models import ZERO, LedgerPostedModel


class Attendance(LedgerPostedModel):
    class Status(models.TextChoices):
        PRESENT = "present", "Present"
        ABSENT = "absent", "Absent"
        HALFDAY = "halfday", "Half day"

    date = models.DateField()
    worker = models.ForeignKey("workers.Worker", on_delete=models.PROTECT, related_name="attendance")
    project = models.ForeignKey("projects.Project", on_delete=models.PROTECT, related_name="attendance")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PRESENT)
    overtime_hours = models.DecimalField(
        max_digits=5, decimal_places=2, default=ZERO, validators=[MinValueValidator(0)]
    )
    notes = models.TextField(blank=True)
    earned_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["worker", "date"], name="attendance_worker_date_uniq"),
        ]
        indexes = [
            models.Index(fields=["project", "date"], name="attendance_project_date_idx"),
        ]

    def __str__(self):
        return f"{self.worker_id}:{self.date}:{self.status}"
