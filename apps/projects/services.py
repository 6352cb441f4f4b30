from __future__ import annotations

from apps.ledger.models import ZERO
from apps.ledger.services import sum_amount
from apps.materials.models import Material
from apps.payments.models import Payment
from apps.salaries.models import Salary

from .models import Project


def project_finance_summary(project: Project) -> dict:
    materials = Material.objects.filter(project=project)
    payments = Payment.objects.filter(project=project)
    salaries = Salary.objects.filter(project=project).select_related("worker")

    material_cost = sum_amount(materials, "total_cost")
    payments_total = sum_amount(payments, "amount")
    salary_cost = sum_amount(salaries, "amount")
    expenses = material_cost + salary_cost

    return {
        "project": {
            "id": project.id,
            "name": project.name,
            "total_amount": project.total_amount,
            "paid_amount": project.paid_amount,
            "pending_amount": project.pending_amount,
            "current_balance": project.current_balance,
        },
        "materials": {
            "items": list(materials.values("id", "name", "total_cost", "purchase_date")),
            "total_cost": material_cost,
        },
        "payments": {
            "items": list(payments.values("id", "amount", "date", "payment_method")),
            "total_amount": payments_total,
        },
        "salaries": {
            "items": [
                {
                    "id": salary.id,
                    "amount": salary.amount,
                    "date": salary.date,
                    "worker_id": salary.worker_id,
                    "worker_name": salary.worker.name,
                }
                for salary in salaries
            ],
            "total_amount": salary_cost,
        },
        "total_expenses": expenses,
        "net_profit": payments_total - expenses,
    }


def owner_projects_summary(owner, projects) -> dict:
    projects = list(projects)
    return {
        "owner": {"id": owner.id, "name": owner.name, "company": owner.company},
        "total_projects": len(projects),
        "total_amount": sum((p.total_amount for p in projects), ZERO),
        "paid_amount": sum((p.paid_amount for p in projects), ZERO),
        "pending_amount": sum((p.pending_amount for p in projects), ZERO),
    }
