"""Read-only aggregates over the transaction records and cached balances."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncDay, TruncMonth

from apps.attendance.models import Attendance
from apps.ledger.models import ZERO
from apps.ledger.services import sum_amount
from apps.materials.models import Material
from apps.payments.models import Payment
from apps.projects.models import Project, ProjectOwner
from apps.salaries.models import Salary
from apps.workers.models import Worker


def _in_range(queryset, start: date | None, end: date | None, field: str = "date"):
    if start and end:
        return queryset.filter(**{f"{field}__range": (start, end)})
    return queryset


def dashboard_stats() -> dict:
    return {
        "total_projects": Project.objects.count(),
        "active_projects": Project.objects.filter(status=Project.Status.IN_PROGRESS).count(),
        "total_workers": Worker.objects.count(),
        "total_owners": ProjectOwner.objects.count(),
        "total_materials_cost": sum_amount(Material.objects.all(), "total_cost"),
        "total_payments": sum_amount(Payment.objects.all(), "amount"),
        "total_salaries": sum_amount(Salary.objects.all(), "amount"),
        "pending_salaries": sum_amount(Worker.objects.all(), "pending_salary"),
    }


def recent_activities(limit: int = 10) -> list[dict]:
    payments = Payment.objects.select_related("project", "project_owner").order_by("-created_at", "-id")[:limit]
    salaries = Salary.objects.select_related("worker", "project").order_by("-created_at", "-id")[:limit]
    attendance = Attendance.objects.select_related("worker", "project").order_by("-created_at", "-id")[:limit]

    activities = []
    for payment in payments:
        project_name = payment.project.name if payment.project_id else "N/A"
        activities.append(
            {
                "type": "payment",
                "id": payment.id,
                "description": f"Payment of {payment.amount} received for project {project_name}",
                "amount": payment.amount,
                "date": payment.created_at,
            }
        )
    for salary in salaries:
        activities.append(
            {
                "type": "salary",
                "id": salary.id,
                "description": f"Salary of {salary.amount} paid to {salary.worker.name}",
                "amount": salary.amount,
                "date": salary.created_at,
            }
        )
    for record in attendance:
        activities.append(
            {
                "type": "attendance",
                "id": record.id,
                "description": f"{record.worker.name} marked as {record.status} for project {record.project.name}",
                "amount": record.earned_amount,
                "date": record.created_at,
            }
        )

    activities.sort(key=lambda item: item["date"], reverse=True)
    return activities[:limit]


def upcoming_payments(low_balance_threshold) -> dict:
    workers = Worker.objects.filter(pending_salary__gt=0).order_by("-pending_salary", "id")
    projects = (
        Project.objects.select_related("owner")
        .filter(current_balance__lt=Decimal(low_balance_threshold))
        .order_by("current_balance", "id")
    )
    return {
        "pending_salaries": [
            {
                "worker_id": worker.id,
                "name": worker.name,
                "phone": worker.phone,
                "pending_salary": worker.pending_salary,
                "payment_status": worker.payment_status,
            }
            for worker in workers
        ],
        "low_balance_projects": [
            {
                "project_id": project.id,
                "name": project.name,
                "current_balance": project.current_balance,
                "owner": {"id": project.owner_id, "name": project.owner.name, "phone": project.owner.phone},
            }
            for project in projects
        ],
    }


def financial_report(start: date | None = None, end: date | None = None) -> dict:
    materials = _in_range(Material.objects.all(), start, end, "purchase_date")
    payments = _in_range(Payment.objects.all(), start, end)
    salaries = _in_range(Salary.objects.all(), start, end)

    def per_project(queryset, field):
        rows = queryset.filter(project__isnull=False).values("project_id").annotate(total=Sum(field)).order_by()
        return {row["project_id"]: row["total"] or ZERO for row in rows}

    material_by_project = per_project(materials, "total_cost")
    payment_by_project = per_project(payments, "amount")
    salary_by_project = per_project(salaries, "amount")

    project_financials = []
    for project in Project.objects.select_related("owner").order_by("name", "id"):
        material_cost = material_by_project.get(project.id, ZERO)
        payment_amount = payment_by_project.get(project.id, ZERO)
        salary_amount = salary_by_project.get(project.id, ZERO)
        expenses = material_cost + salary_amount
        project_financials.append(
            {
                "project": {
                    "id": project.id,
                    "name": project.name,
                    "owner": project.owner.name,
                    "total_amount": project.total_amount,
                    "current_balance": project.current_balance,
                },
                "material_cost": material_cost,
                "payment_amount": payment_amount,
                "salary_amount": salary_amount,
                "expenses": expenses,
                "net_profit": payment_amount - expenses,
            }
        )

    total_material = sum_amount(materials, "total_cost")
    total_payments = sum_amount(payments, "amount")
    total_salaries = sum_amount(salaries, "amount")
    total_expenses = total_material + total_salaries
    return {
        "project_financials": project_financials,
        "summary": {
            "total_material_cost": total_material,
            "total_payment_amount": total_payments,
            "total_salary_amount": total_salaries,
            "total_expenses": total_expenses,
            "net_profit": total_payments - total_expenses,
        },
    }


def worker_performance(start: date | None = None, end: date | None = None) -> list[dict]:
    attendance_rows = (
        _in_range(Attendance.objects.all(), start, end)
        .values("worker_id")
        .annotate(
            present=Count("id", filter=Q(status=Attendance.Status.PRESENT)),
            halfday=Count("id", filter=Q(status=Attendance.Status.HALFDAY)),
            absent=Count("id", filter=Q(status=Attendance.Status.ABSENT)),
            overtime_hours=Sum("overtime_hours"),
            earned=Sum("earned_amount"),
        )
        .order_by()
    )
    attendance_by_worker = {row["worker_id"]: row for row in attendance_rows}
    paid_by_worker = {
        row["worker_id"]: row["total"] or ZERO
        for row in _in_range(Salary.objects.all(), start, end).values("worker_id").annotate(total=Sum("amount")).order_by()
    }

    report = []
    for worker in Worker.objects.order_by("name", "id"):
        row = attendance_by_worker.get(worker.id, {})
        present = row.get("present", 0)
        halfday = row.get("halfday", 0)
        absent = row.get("absent", 0)
        total_days = present + halfday + absent
        percentage = Decimal("0.00")
        if total_days:
            percentage = (Decimal(present) + Decimal(halfday) / 2) * 100 / total_days
        report.append(
            {
                "worker": {
                    "id": worker.id,
                    "name": worker.name,
                    "role": worker.role,
                    "daily_salary": worker.daily_salary,
                },
                "attendance": {
                    "present": present,
                    "halfday": halfday,
                    "absent": absent,
                    "total": total_days,
                    "percentage": percentage.quantize(Decimal("0.01")),
                    "overtime_hours": row.get("overtime_hours") or ZERO,
                },
                "salary": {
                    "earned": row.get("earned") or ZERO,
                    "paid": paid_by_worker.get(worker.id, ZERO),
                    "pending": worker.pending_salary,
                },
            }
        )
    return report


def salary_report(start: date, end: date, group_by: str = "month") -> list[dict]:
    trunc = TruncMonth if group_by == "month" else TruncDay
    rows = (
        Salary.objects.filter(date__range=(start, end))
        .annotate(period=trunc("date"))
        .values("period", "worker_id", "worker__name")
        .annotate(total_amount=Sum("amount"), count=Count("id"))
        .order_by("period", "worker__name")
    )
    grouped = defaultdict(list)
    for row in rows:
        grouped[row["period"]].append(
            {
                "worker_id": row["worker_id"],
                "worker_name": row["worker__name"],
                "total_amount": row["total_amount"] or ZERO,
                "count": row["count"],
            }
        )
    return [
        {
            "period": period.strftime("%Y-%m") if group_by == "month" else period.strftime("%Y-%m-%d"),
            "workers": workers,
            "total_amount": sum((item["total_amount"] for item in workers), ZERO),
        }
        for period, workers in grouped.items()
    ]
