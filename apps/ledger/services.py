"""
Balance ledger.

Every create, update or delete of a Material, Attendance, Salary or Payment
nudges a cached aggregate on its parent (Project, Worker, ProjectOwner).
Callers run the record write and the matching ``post_*`` call inside one
``transaction.atomic`` block. Parent rows are changed with ``F()`` increments,
or under ``select_for_update`` when the new value depends on the current one.

Each transaction record remembers what was applied (``ledger_posted`` and
``posted_amount``), so reversal restores exactly that amount and a second
reversal is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import transaction
from django.db.models import DecimalField, F, Sum, Value
from django.db.models.functions import Coalesce

from apps.attendance.models import Attendance
from apps.materials.models import Material
from apps.payments.models import Payment
from apps.projects.models import Project, ProjectOwner
from apps.salaries.models import Salary
from apps.workers.models import Worker

from .exceptions import SalaryUnderflowError
from .models import ZERO


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
OVERTIME_DIVISOR = Decimal("8")

UNDERFLOW_CLAMP = "clamp"
UNDERFLOW_ALLOW_NEGATIVE = "allow_negative"
UNDERFLOW_ERROR = "error"
UNDERFLOW_POLICIES = {UNDERFLOW_CLAMP, UNDERFLOW_ALLOW_NEGATIVE, UNDERFLOW_ERROR}


def underflow_policy() -> str:
    policy = getattr(settings, "LEDGER_SALARY_UNDERFLOW", UNDERFLOW_CLAMP)
    if policy not in UNDERFLOW_POLICIES:
        raise ImproperlyConfigured(
            f"LEDGER_SALARY_UNDERFLOW must be one of {sorted(UNDERFLOW_POLICIES)}, got {policy!r}."
        )
    return policy


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amount(queryset, field: str) -> Decimal:
    total = queryset.aggregate(
        total=Coalesce(Sum(field), Value(ZERO), output_field=DecimalField(max_digits=16, decimal_places=2))
    )["total"]
    return _money(total)


def _net_changes(old_parent_id, old_amount: Decimal, new_parent_id, new_amount: Decimal) -> list[tuple[int, Decimal]]:
    """Collapse "reverse old, apply new" into one signed delta per parent."""
    changes: dict[int, Decimal] = {}
    if old_parent_id is not None and old_amount:
        changes[old_parent_id] = changes.get(old_parent_id, ZERO) - old_amount
    if new_parent_id is not None and new_amount:
        changes[new_parent_id] = changes.get(new_parent_id, ZERO) + new_amount
    return [(parent_id, delta) for parent_id, delta in changes.items() if delta]


def _applied(record) -> Decimal:
    return record.posted_amount if record.ledger_posted else ZERO


def _mark_posted(record, *, posted: bool, amount: Decimal, **extra) -> None:
    record.ledger_posted = posted
    record.posted_amount = amount
    for name, value in extra.items():
        setattr(record, name, value)
    if record.pk is not None:
        type(record).objects.filter(pk=record.pk).update(ledger_posted=posted, posted_amount=amount, **extra)


@dataclass(frozen=True)
class Drift:
    entity: str
    entity_id: int
    field: str
    stored: Decimal
    expected: Decimal

    def as_dict(self) -> dict:
        payload = asdict(self)
        payload["stored"] = str(self.stored)
        payload["expected"] = str(self.expected)
        return payload


class LedgerService:
    # ------------------------------------------------------------------
    # Parent aggregates
    # ------------------------------------------------------------------

    @staticmethod
    def refresh_payment_status(worker_id: int) -> str | None:
        pending = Worker.objects.filter(pk=worker_id).values_list("pending_salary", flat=True).first()
        if pending is None:
            return None
        if pending <= ZERO:
            status = Worker.PaymentStatus.PAID
        elif Salary.objects.filter(worker_id=worker_id).exists():
            status = Worker.PaymentStatus.PARTIAL
        else:
            status = Worker.PaymentStatus.PENDING
        Worker.objects.filter(pk=worker_id).update(payment_status=status)
        return status

    @classmethod
    def credit_worker(cls, worker_id: int, amount: Decimal) -> bool:
        return cls.shift_worker(worker_id, amount)

    @classmethod
    def shift_worker(cls, worker_id: int, delta: Decimal) -> bool:
        """
        Move the worker's pending salary by ``delta`` exactly. Attendance
        earnings and their reversals go through here, the underflow policy
        only governs salary payments.
        """
        updated = Worker.objects.filter(pk=worker_id).update(pending_salary=F("pending_salary") + delta)
        if not updated:
            logger.warning("Worker %s not found, skipped shifting pending salary by %s.", worker_id, delta)
            return False
        cls.refresh_payment_status(worker_id)
        return True

    @classmethod
    def debit_worker(cls, worker_id: int, amount: Decimal) -> Decimal | None:
        """
        Take ``amount`` off the worker's pending salary under the configured
        underflow policy. Returns the amount actually deducted, or None when
        the worker does not exist.
        """
        policy = underflow_policy()
        worker = Worker.objects.select_for_update().filter(pk=worker_id).first()
        if worker is None:
            logger.warning("Worker %s not found, skipped debiting %s.", worker_id, amount)
            return None

        applied = amount
        if worker.pending_salary - amount < ZERO:
            if policy == UNDERFLOW_ERROR:
                raise SalaryUnderflowError(worker_id=worker_id, pending=worker.pending_salary, amount=amount)
            if policy == UNDERFLOW_CLAMP:
                applied = max(worker.pending_salary, ZERO)
                logger.warning(
                    "Worker %s pending salary clamped at zero: debit %s, deducted %s.",
                    worker_id,
                    amount,
                    applied,
                )

        if applied:
            Worker.objects.filter(pk=worker_id).update(pending_salary=F("pending_salary") - applied)
        cls.refresh_payment_status(worker_id)
        return applied

    @staticmethod
    def _debit_project_balance(project_id: int, amount: Decimal) -> bool:
        updated = Project.objects.filter(pk=project_id).update(current_balance=F("current_balance") - amount)
        if not updated:
            logger.warning("Project %s not found, skipped material debit %s.", project_id, amount)
        return bool(updated)

    @staticmethod
    def _credit_project_paid(project_id: int, amount: Decimal) -> bool:
        updated = Project.objects.filter(pk=project_id).update(
            paid_amount=F("paid_amount") + amount,
            pending_amount=F("pending_amount") - amount,
        )
        if not updated:
            logger.warning("Project %s not found, skipped payment credit %s.", project_id, amount)
        return bool(updated)

    @staticmethod
    def _credit_owner_paid(owner_id: int, amount: Decimal) -> bool:
        updated = ProjectOwner.objects.filter(pk=owner_id).update(
            paid_amount=F("paid_amount") + amount,
            balance_amount=F("balance_amount") - amount,
        )
        if not updated:
            logger.warning("Project owner %s not found, skipped payment credit %s.", owner_id, amount)
        return bool(updated)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @staticmethod
    def post_project_update(old: Project, new: Project) -> None:
        """An edited contract value shifts the current balance by the same delta."""
        delta = new.total_amount - old.total_amount
        if not delta:
            return
        Project.objects.filter(pk=new.pk).update(current_balance=F("current_balance") + delta)
        new.refresh_from_db(fields=["current_balance", "pending_amount"])

    # ------------------------------------------------------------------
    # Materials: debit Project.current_balance
    # ------------------------------------------------------------------

    @classmethod
    def post_material_create(cls, material: Material) -> None:
        cost = _money(material.total_cost)
        if cls._debit_project_balance(material.project_id, cost):
            _mark_posted(material, posted=True, amount=cost)

    @classmethod
    def post_material_update(cls, old: Material, new: Material) -> None:
        cost = _money(new.total_cost)
        target = new.project_id if Project.objects.filter(pk=new.project_id).exists() else None
        for project_id, delta in _net_changes(old.project_id, _applied(old), target, cost):
            cls._debit_project_balance(project_id, delta)
        if target is None:
            logger.warning("Project %s not found, material %s not posted.", new.project_id, new.pk)
        _mark_posted(new, posted=target is not None, amount=cost if target is not None else ZERO)

    @classmethod
    def post_material_delete(cls, material: Material) -> None:
        if not material.ledger_posted:
            return
        if material.posted_amount:
            cls._debit_project_balance(material.project_id, -material.posted_amount)
        _mark_posted(material, posted=False, amount=ZERO)

    # ------------------------------------------------------------------
    # Attendance: credit Worker.pending_salary
    # ------------------------------------------------------------------

    @staticmethod
    def attendance_earning(status: str, overtime_hours, daily_salary) -> Decimal:
        daily = Decimal(daily_salary or 0)
        if status == Attendance.Status.PRESENT:
            base = daily
        elif status == Attendance.Status.HALFDAY:
            base = daily / 2
        else:
            base = ZERO
        overtime = Decimal(overtime_hours or 0) * daily / OVERTIME_DIVISOR
        return _money(base + overtime)

    @classmethod
    def _earning_for(cls, attendance: Attendance) -> Decimal | None:
        daily_salary = Worker.objects.filter(pk=attendance.worker_id).values_list("daily_salary", flat=True).first()
        if daily_salary is None:
            return None
        return cls.attendance_earning(attendance.status, attendance.overtime_hours, daily_salary)

    @classmethod
    def post_attendance_create(cls, attendance: Attendance) -> None:
        earning = cls._earning_for(attendance)
        if earning is None:
            logger.warning("Worker %s not found, attendance %s not posted.", attendance.worker_id, attendance.pk)
            return
        if earning:
            cls.credit_worker(attendance.worker_id, earning)
        _mark_posted(attendance, posted=True, amount=earning, earned_amount=earning)

    @classmethod
    def post_attendance_update(cls, old: Attendance, new: Attendance) -> None:
        earning = cls._earning_for(new)
        new_amount = earning or ZERO
        for worker_id, delta in _net_changes(old.worker_id, _applied(old), new.worker_id, new_amount):
            cls.shift_worker(worker_id, delta)
        if earning is None:
            logger.warning("Worker %s not found, attendance %s not posted.", new.worker_id, new.pk)
            _mark_posted(new, posted=False, amount=ZERO, earned_amount=ZERO)
            return
        _mark_posted(new, posted=True, amount=earning, earned_amount=earning)

    @classmethod
    def post_attendance_delete(cls, attendance: Attendance) -> None:
        if not attendance.ledger_posted:
            return
        if attendance.posted_amount:
            cls.shift_worker(attendance.worker_id, -attendance.posted_amount)
        _mark_posted(attendance, posted=False, amount=ZERO)

    # ------------------------------------------------------------------
    # Salaries: debit Worker.pending_salary
    # ------------------------------------------------------------------

    @classmethod
    def post_salary_create(cls, salary: Salary) -> None:
        applied = cls.debit_worker(salary.worker_id, _money(salary.amount))
        if applied is None:
            return
        _mark_posted(salary, posted=True, amount=applied)

    @classmethod
    def post_salary_update(cls, old: Salary, new: Salary) -> None:
        amount = _money(new.amount)
        previously_applied = _applied(old)

        if old.worker_id != new.worker_id:
            if previously_applied:
                cls.credit_worker(old.worker_id, previously_applied)
            applied = cls.debit_worker(new.worker_id, amount)
            if applied is None:
                _mark_posted(new, posted=False, amount=ZERO)
            else:
                _mark_posted(new, posted=True, amount=applied)
            return

        difference = amount - previously_applied
        if difference > 0:
            extra = cls.debit_worker(new.worker_id, difference)
            if extra is None:
                _mark_posted(new, posted=False, amount=ZERO)
                return
            applied = previously_applied + extra
        elif difference < 0:
            cls.credit_worker(new.worker_id, -difference)
            applied = amount
        else:
            applied = previously_applied
            cls.refresh_payment_status(new.worker_id)
        _mark_posted(new, posted=True, amount=applied)

    @classmethod
    def post_salary_delete(cls, salary: Salary) -> None:
        """Call after the row is deleted so payment status no longer counts it."""
        if not salary.ledger_posted:
            return
        if salary.posted_amount:
            cls.credit_worker(salary.worker_id, salary.posted_amount)
        else:
            cls.refresh_payment_status(salary.worker_id)
        _mark_posted(salary, posted=False, amount=ZERO)

    # ------------------------------------------------------------------
    # Payments: credit Project.paid_amount and ProjectOwner.paid_amount
    # ------------------------------------------------------------------

    @classmethod
    def post_payment_create(cls, payment: Payment) -> None:
        amount = _money(payment.amount)
        posted = False
        if payment.project_id is not None:
            posted = cls._credit_project_paid(payment.project_id, amount) or posted
        if payment.project_owner_id is not None:
            posted = cls._credit_owner_paid(payment.project_owner_id, amount) or posted
        if posted:
            _mark_posted(payment, posted=True, amount=amount)

    @classmethod
    def post_payment_update(cls, old: Payment, new: Payment) -> None:
        amount = _money(new.amount)
        previously_applied = _applied(old)
        project_id = new.project_id
        if project_id is not None and not Project.objects.filter(pk=project_id).exists():
            project_id = None
        owner_id = new.project_owner_id
        if owner_id is not None and not ProjectOwner.objects.filter(pk=owner_id).exists():
            owner_id = None

        for parent_id, delta in _net_changes(old.project_id, previously_applied, project_id, amount):
            cls._credit_project_paid(parent_id, delta)
        for parent_id, delta in _net_changes(old.project_owner_id, previously_applied, owner_id, amount):
            cls._credit_owner_paid(parent_id, delta)

        posted = project_id is not None or owner_id is not None
        _mark_posted(new, posted=posted, amount=amount if posted else ZERO)

    @classmethod
    def post_payment_delete(cls, payment: Payment) -> None:
        if not payment.ledger_posted:
            return
        if payment.posted_amount:
            if payment.project_id is not None:
                cls._credit_project_paid(payment.project_id, -payment.posted_amount)
            if payment.project_owner_id is not None:
                cls._credit_owner_paid(payment.project_owner_id, -payment.posted_amount)
        _mark_posted(payment, posted=False, amount=ZERO)

    # ------------------------------------------------------------------
    # Recompute from live records
    # ------------------------------------------------------------------

    @staticmethod
    def expected_worker_pending(worker: Worker) -> Decimal:
        """Posted attendance credits minus the salary amounts actually deducted."""
        earned = sum_amount(Attendance.objects.filter(worker=worker, ledger_posted=True), "posted_amount")
        paid = sum_amount(Salary.objects.filter(worker=worker, ledger_posted=True), "posted_amount")
        return earned - paid

    @staticmethod
    def expected_project_balance(project: Project) -> Decimal:
        return _money(project.total_amount) - sum_amount(Material.objects.filter(project=project), "total_cost")

    @staticmethod
    def expected_project_paid(project: Project) -> Decimal:
        return sum_amount(Payment.objects.filter(project=project), "amount")

    @staticmethod
    def expected_owner_paid(owner: ProjectOwner) -> Decimal:
        return sum_amount(Payment.objects.filter(project_owner=owner), "amount")

    @classmethod
    def reconcile(cls, *, apply: bool = False) -> list[Drift]:
        drifts: list[Drift] = []
        with transaction.atomic():
            for worker in Worker.objects.select_for_update().order_by("id"):
                expected = cls.expected_worker_pending(worker)
                if worker.pending_salary != expected:
                    drifts.append(Drift("worker", worker.pk, "pending_salary", worker.pending_salary, expected))
                    if apply:
                        Worker.objects.filter(pk=worker.pk).update(pending_salary=expected)
                        cls.refresh_payment_status(worker.pk)

            for project in Project.objects.select_for_update().order_by("id"):
                balance = cls.expected_project_balance(project)
                paid = cls.expected_project_paid(project)
                pending = _money(project.total_amount) - paid
                expected_fields = {
                    "current_balance": balance,
                    "paid_amount": paid,
                    "pending_amount": pending,
                }
                changed = {}
                for field, expected in expected_fields.items():
                    stored = getattr(project, field)
                    if stored != expected:
                        drifts.append(Drift("project", project.pk, field, stored, expected))
                        changed[field] = expected
                if apply and changed:
                    Project.objects.filter(pk=project.pk).update(**changed)

            for owner in ProjectOwner.objects.select_for_update().order_by("id"):
                paid = cls.expected_owner_paid(owner)
                expected_fields = {
                    "paid_amount": paid,
                    "balance_amount": _money(owner.total_project_value) - paid,
                }
                changed = {}
                for field, expected in expected_fields.items():
                    stored = getattr(owner, field)
                    if stored != expected:
                        drifts.append(Drift("project_owner", owner.pk, field, stored, expected))
                        changed[field] = expected
                if apply and changed:
                    ProjectOwner.objects.filter(pk=owner.pk).update(**changed)

        logger.info("Ledger reconcile found %s drift(s), apply=%s.", len(drifts), apply)
        return drifts
