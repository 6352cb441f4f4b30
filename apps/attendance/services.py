from __future__ import annotations

from django.db.models import Count, Q, Sum

from apps.ledger.models import ZERO


GROUP_FIELDS = {
    "date": ("date", "date"),
    "worker": ("worker_id", "worker__name"),
    "project": ("project_id", "project__name"),
}


def attendance_report(queryset, group_by: str) -> list[dict]:
    """Status counts, overtime and earnings per date, worker or project."""
    key_field, label_field = GROUP_FIELDS[group_by]
    rows = (
        queryset.order_by()
        .values(*dict.fromkeys((key_field, label_field)))
        .annotate(
            present=Count("id", filter=Q(status="present")),
            absent=Count("id", filter=Q(status="absent")),
            halfday=Count("id", filter=Q(status="halfday")),
            total=Count("id"),
            overtime_hours=Sum("overtime_hours"),
            earned_amount=Sum("earned_amount"),
        )
        .order_by(label_field, key_field)
    )
    return [
        {
            "key": row[key_field],
            "label": str(row[label_field]),
            "present": row["present"],
            "absent": row["absent"],
            "halfday": row["halfday"],
            "total": row["total"],
            "overtime_hours": row["overtime_hours"] or ZERO,
            "earned_amount": row["earned_amount"] or ZERO,
        }
        for row in rows
    ]
