from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.db import transaction
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import Role, User
from apps.attendance.models import Attendance
from apps.materials.models import Material
from apps.payments.models import Payment
from apps.projects.models import Project, ProjectOwner
from apps.salaries.models import Salary
from apps.workers.models import Worker

from .exceptions import SalaryUnderflowError
from .services import UNDERFLOW_CLAMP, UNDERFLOW_POLICIES, LedgerService, sum_amount


class LedgerTestMixin:
    def setUp(self):
        self.owner = ProjectOwner.objects.create(
            name="Owner",
            email="owner@example.com",
            phone="+910000000001",
            address="Street 1",
            total_project_value=Decimal("100000.00"),
        )
        self.project = Project.objects.create(
            name="Villa",
            owner=self.owner,
            total_amount=Decimal("100000.00"),
        )
        self.worker = Worker.objects.create(
            name="Ravi",
            phone="+910000000002",
            role="mason",
            address="Street 2",
            daily_salary=Decimal("800.00"),
        )

    def reload(self, obj):
        obj.refresh_from_db()
        return obj

    def mark(self, day, status=Attendance.Status.PRESENT, overtime="0", worker=None):
        attendance = Attendance.objects.create(
            date=day,
            worker=worker or self.worker,
            project=self.project,
            status=status,
            overtime_hours=Decimal(overtime),
        )
        LedgerService.post_attendance_create(attendance)
        return attendance

    def pay_salary(self, amount, worker=None):
        salary = Salary.objects.create(worker=worker or self.worker, amount=Decimal(amount), date=date(2026, 3, 10))
        LedgerService.post_salary_create(salary)
        return salary


class AttendanceEarningTests(TestCase):
    def test_present_halfday_absent(self):
        self.assertEqual(LedgerService.attendance_earning("present", 0, Decimal("800")), Decimal("800.00"))
        self.assertEqual(LedgerService.attendance_earning("halfday", 0, Decimal("800")), Decimal("400.00"))
        self.assertEqual(LedgerService.attendance_earning("absent", 0, Decimal("800")), Decimal("0.00"))

    def test_overtime_is_additive_for_any_status(self):
        self.assertEqual(LedgerService.attendance_earning("present", Decimal("2"), Decimal("800")), Decimal("1000.00"))
        self.assertEqual(LedgerService.attendance_earning("absent", Decimal("4"), Decimal("800")), Decimal("400.00"))

    def test_rounds_to_cents(self):
        self.assertEqual(LedgerService.attendance_earning("halfday", 0, Decimal("333.33")), Decimal("166.67"))


class WorkerLedgerTests(LedgerTestMixin, TestCase):
    def test_daily_wage_with_overtime_then_salary(self):
        first = self.mark(date(2026, 3, 1), overtime="2")
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("1000.00"))
        self.assertEqual(self.reload(first).earned_amount, Decimal("1000.00"))
        self.assertTrue(first.ledger_posted)

        self.mark(date(2026, 3, 2), status=Attendance.Status.ABSENT)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("1000.00"))

        self.pay_salary("600")
        worker = self.reload(self.worker)
        self.assertEqual(worker.pending_salary, Decimal("400.00"))
        self.assertEqual(worker.payment_status, Worker.PaymentStatus.PARTIAL)

    def test_payment_status_pending_without_salary_and_paid_at_zero(self):
        self.mark(date(2026, 3, 1))
        self.assertEqual(self.reload(self.worker).payment_status, Worker.PaymentStatus.PENDING)
        self.pay_salary("800")
        self.assertEqual(self.reload(self.worker).payment_status, Worker.PaymentStatus.PAID)

    def test_attendance_update_applies_net_delta(self):
        attendance = self.mark(date(2026, 3, 1))
        previous = Attendance.objects.get(pk=attendance.pk)
        attendance.status = Attendance.Status.HALFDAY
        attendance.save()
        LedgerService.post_attendance_update(previous, attendance)

        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("400.00"))
        self.assertEqual(self.reload(attendance).earned_amount, Decimal("400.00"))

    def test_attendance_moved_to_another_worker(self):
        other = Worker.objects.create(
            name="Anil",
            phone="+910000000003",
            role="helper",
            address="Street 3",
            daily_salary=Decimal("500.00"),
        )
        attendance = self.mark(date(2026, 3, 1))
        previous = Attendance.objects.get(pk=attendance.pk)
        attendance.worker = other
        attendance.save()
        LedgerService.post_attendance_update(previous, attendance)

        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("0.00"))
        self.assertEqual(self.reload(other).pending_salary, Decimal("500.00"))

    def test_reversal_uses_recorded_earning_after_rate_change(self):
        attendance = self.mark(date(2026, 3, 1))
        Worker.objects.filter(pk=self.worker.pk).update(daily_salary=Decimal("1200.00"))
        attendance.delete()
        LedgerService.post_attendance_delete(attendance)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("0.00"))

    def test_delete_is_idempotent(self):
        attendance = self.mark(date(2026, 3, 1))
        self.mark(date(2026, 3, 2))
        attendance.delete()
        LedgerService.post_attendance_delete(attendance)
        LedgerService.post_attendance_delete(attendance)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("800.00"))

    def test_salary_update_and_delete(self):
        self.mark(date(2026, 3, 1))
        self.mark(date(2026, 3, 2))
        salary = self.pay_salary("500")

        previous = Salary.objects.get(pk=salary.pk)
        salary.amount = Decimal("700.00")
        salary.save()
        LedgerService.post_salary_update(previous, salary)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("900.00"))
        self.assertEqual(self.reload(salary).posted_amount, Decimal("700.00"))

        previous = Salary.objects.get(pk=salary.pk)
        salary.amount = Decimal("200.00")
        salary.save()
        LedgerService.post_salary_update(previous, salary)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("1400.00"))

        salary.delete()
        LedgerService.post_salary_delete(salary)
        LedgerService.post_salary_delete(salary)
        worker = self.reload(self.worker)
        self.assertEqual(worker.pending_salary, Decimal("1600.00"))
        self.assertEqual(worker.payment_status, Worker.PaymentStatus.PENDING)

    def test_missing_worker_skips_posting(self):
        attendance = Attendance(
            date=date(2026, 3, 1),
            worker_id=999999,
            project=self.project,
            status=Attendance.Status.PRESENT,
        )
        LedgerService.post_attendance_create(attendance)
        self.assertFalse(attendance.ledger_posted)
        self.assertIsNone(LedgerService.debit_worker(999999, Decimal("10")))


class UnderflowPolicyTests(LedgerTestMixin, TestCase):
    def test_clamp_floors_at_zero_and_restores_only_what_was_deducted(self):
        self.mark(date(2026, 3, 1))
        salary = self.pay_salary("1000")

        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("0.00"))
        self.assertEqual(self.reload(salary).posted_amount, Decimal("800.00"))

        salary.delete()
        LedgerService.post_salary_delete(salary)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("800.00"))

    @override_settings(LEDGER_SALARY_UNDERFLOW="allow_negative")
    def test_allow_negative_keeps_balance_below_zero(self):
        self.mark(date(2026, 3, 1))
        salary = self.pay_salary("1000")
        worker = self.reload(self.worker)
        self.assertEqual(worker.pending_salary, Decimal("-200.00"))
        self.assertEqual(worker.payment_status, Worker.PaymentStatus.PAID)
        self.assertEqual(self.reload(salary).posted_amount, Decimal("1000.00"))

    @override_settings(LEDGER_SALARY_UNDERFLOW="error")
    def test_error_policy_raises_without_touching_balance(self):
        self.mark(date(2026, 3, 1))
        with self.assertRaises(SalaryUnderflowError):
            self.pay_salary("1000")
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("800.00"))

    def test_attendance_reversal_after_full_payment_is_exact(self):
        attendance = self.mark(date(2026, 3, 1))
        salary = self.pay_salary("800")

        attendance.delete()
        LedgerService.post_attendance_delete(attendance)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("-800.00"))
        self.assertEqual(LedgerService.reconcile(), [])

        salary.delete()
        LedgerService.post_salary_delete(salary)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("0.00"))
        self.assertEqual(LedgerService.reconcile(), [])

    @override_settings(LEDGER_SALARY_UNDERFLOW="error")
    def test_error_policy_does_not_block_attendance_edits(self):
        attendance = self.mark(date(2026, 3, 1))
        salary = self.pay_salary("800")

        previous = Attendance.objects.get(pk=attendance.pk)
        attendance.status = Attendance.Status.HALFDAY
        attendance.save()
        LedgerService.post_attendance_update(previous, attendance)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("-400.00"))

        attendance.delete()
        LedgerService.post_attendance_delete(attendance)
        salary.delete()
        LedgerService.post_salary_delete(salary)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("0.00"))


class ProjectLedgerTests(LedgerTestMixin, TestCase):
    def test_material_debit_and_quantity_edit(self):
        material = Material.objects.create(
            name="Cement",
            category="cement",
            quantity=Decimal("10"),
            unit_price=Decimal("50"),
            project=self.project,
        )
        LedgerService.post_material_create(material)
        self.assertEqual(self.reload(self.project).current_balance, Decimal("99500.00"))

        previous = Material.objects.get(pk=material.pk)
        material.quantity = Decimal("20")
        material.save()
        LedgerService.post_material_update(previous, material)
        project = self.reload(self.project)
        self.assertEqual(project.current_balance, Decimal("99000.00"))
        self.assertEqual(project.pending_amount, project.total_amount - project.paid_amount)

        material.delete()
        LedgerService.post_material_delete(material)
        LedgerService.post_material_delete(material)
        self.assertEqual(self.reload(self.project).current_balance, Decimal("100000.00"))

    def test_payment_credit_and_reversal(self):
        payment = Payment.objects.create(project=self.project, amount=Decimal("30000"))
        LedgerService.post_payment_create(payment)

        self.assertEqual(payment.project_owner_id, self.owner.id)
        project = self.reload(self.project)
        owner = self.reload(self.owner)
        self.assertEqual(project.paid_amount, Decimal("30000.00"))
        self.assertEqual(project.pending_amount, Decimal("70000.00"))
        self.assertEqual(owner.paid_amount, Decimal("30000.00"))
        self.assertEqual(owner.balance_amount, Decimal("70000.00"))

        payment.delete()
        LedgerService.post_payment_delete(payment)
        project = self.reload(self.project)
        self.assertEqual(project.paid_amount, Decimal("0.00"))
        self.assertEqual(project.pending_amount, Decimal("100000.00"))
        self.assertEqual(self.reload(self.owner).paid_amount, Decimal("0.00"))

    def test_payment_amount_edit(self):
        payment = Payment.objects.create(project=self.project, amount=Decimal("30000"))
        LedgerService.post_payment_create(payment)
        previous = Payment.objects.get(pk=payment.pk)
        payment.amount = Decimal("45000")
        payment.save()
        LedgerService.post_payment_update(previous, payment)

        project = self.reload(self.project)
        self.assertEqual(project.paid_amount, Decimal("45000.00"))
        self.assertEqual(project.pending_amount, Decimal("55000.00"))
        self.assertEqual(self.reload(self.owner).paid_amount, Decimal("45000.00"))

    def test_total_amount_edit_shifts_balance(self):
        previous = Project.objects.get(pk=self.project.pk)
        self.project.total_amount = Decimal("120000.00")
        self.project.save()
        LedgerService.post_project_update(previous, self.project)

        project = self.reload(self.project)
        self.assertEqual(project.current_balance, Decimal("120000.00"))
        self.assertEqual(project.pending_amount, Decimal("120000.00"))


class ReconcileTests(LedgerTestMixin, TestCase):
    def test_consistent_ledger_has_no_drift(self):
        self.mark(date(2026, 3, 1))
        self.pay_salary("300")
        payment = Payment.objects.create(project=self.project, amount=Decimal("1000"))
        LedgerService.post_payment_create(payment)
        self.assertEqual(LedgerService.reconcile(), [])

    def test_reports_and_fixes_drift(self):
        self.mark(date(2026, 3, 1))
        Worker.objects.filter(pk=self.worker.pk).update(pending_salary=Decimal("5.00"))
        Project.objects.filter(pk=self.project.pk).update(current_balance=Decimal("1.00"))

        drifts = LedgerService.reconcile()
        fields = {(drift.entity, drift.field) for drift in drifts}
        self.assertIn(("worker", "pending_salary"), fields)
        self.assertIn(("project", "current_balance"), fields)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("5.00"))

        LedgerService.reconcile(apply=True)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("800.00"))
        self.assertEqual(self.reload(self.project).current_balance, Decimal("100000.00"))
        self.assertEqual(LedgerService.reconcile(), [])

    def test_expected_pending_follows_deducted_amounts(self):
        self.mark(date(2026, 3, 1))
        self.pay_salary("1000")
        self.assertEqual(LedgerService.expected_worker_pending(self.worker), Decimal("0.00"))
        self.assertEqual(LedgerService.reconcile(), [])

    def test_clamped_salary_then_attendance_has_no_drift(self):
        salary = self.pay_salary("1500")
        self.assertEqual(self.reload(salary).posted_amount, Decimal("0.00"))

        self.mark(date(2026, 3, 1))
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("800.00"))
        self.assertEqual(LedgerService.expected_worker_pending(self.worker), Decimal("800.00"))
        self.assertEqual(LedgerService.reconcile(), [])

        LedgerService.reconcile(apply=True)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("800.00"))

        salary.delete()
        LedgerService.post_salary_delete(salary)
        self.assertEqual(self.reload(self.worker).pending_salary, Decimal("800.00"))
        self.assertEqual(LedgerService.reconcile(), [])

    def test_management_command(self):
        Project.objects.filter(pk=self.project.pk).update(current_balance=Decimal("1.00"))
        out = StringIO()
        call_command("reconcile_ledger", stdout=out)
        self.assertIn("current_balance", out.getvalue())
        self.assertEqual(self.reload(self.project).current_balance, Decimal("1.00"))

        call_command("reconcile_ledger", "--apply", stdout=StringIO())
        self.assertEqual(self.reload(self.project).current_balance, Decimal("100000.00"))


class ReconcileApiTests(LedgerTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        self.admin = User.objects.create_user(username="ledger_admin", password="StrongPass123!", role=admin_role)
        self.worker_user = User.objects.create_user(
            username="ledger_worker",
            password="StrongPass123!",
            role=worker_role,
            worker=self.worker,
        )

    def test_admin_can_report_and_apply(self):
        Project.objects.filter(pk=self.project.pk).update(current_balance=Decimal("1.00"))
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/ledger/reconcile/")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["applied"])
        self.assertEqual(response.data["drift_count"], 1)

        response = self.client.post("/api/v1/ledger/reconcile/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["applied"])
        self.assertEqual(self.reload(self.project).current_balance, Decimal("100000.00"))

    def test_worker_cannot_reconcile(self):
        self.client.force_authenticate(user=self.worker_user)
        self.assertEqual(self.client.get("/api/v1/ledger/reconcile/").status_code, 403)


class LedgerReplayTests(LedgerTestMixin, TestCase):
    """Replays mixed edit scripts under every underflow policy and checks the closed forms."""

    SCRIPTS = {
        "clamped_salary_before_attendance": [
            ("pay", "s1", "1500"),
            ("mark", "a1", Attendance.Status.PRESENT, "0"),
            ("edit_pay", "s1", "500"),
            ("mark", "a2", Attendance.Status.HALFDAY, "0"),
            ("unpay", "s1"),
            ("unmark", "a1"),
        ],
        "attendance_reversed_after_payment": [
            ("mark", "a1", Attendance.Status.PRESENT, "0"),
            ("pay", "s1", "800"),
            ("unmark", "a1"),
            ("pay", "s2", "300"),
            ("mark", "a2", Attendance.Status.PRESENT, "2"),
            ("edit_attendance", "a2", Attendance.Status.ABSENT),
            ("unpay", "s1"),
            ("buy", "m1", "4", "2500"),
            ("edit_buy", "m1", "10"),
            ("unbuy", "m1"),
        ],
        "salary_edits_across_the_floor": [
            ("buy", "m1", "2", "1200"),
            ("mark", "a1", Attendance.Status.PRESENT, "0"),
            ("mark", "a2", Attendance.Status.PRESENT, "0"),
            ("pay", "s1", "1000"),
            ("edit_pay", "s1", "2000"),
            ("edit_attendance", "a1", Attendance.Status.HALFDAY),
            ("edit_pay", "s1", "200"),
            ("buy", "m2", "1", "750.50"),
            ("edit_buy", "m1", "3"),
            ("unmark", "a2"),
            ("pay", "s2", "5000"),
            ("edit_attendance", "a1", Attendance.Status.PRESENT),
        ],
    }

    def run_script(self, steps, label):
        worker = Worker.objects.create(
            name=f"Replay {label}",
            phone=f"+9180000{Worker.objects.count():05d}",
            role="helper",
            address="Street 9",
            daily_salary=Decimal("800.00"),
        )
        project = Project.objects.create(name=f"Replay {label}", owner=self.owner, total_amount=Decimal("50000.00"))
        records = {}
        days = iter(range(1, 29))

        for op, key, *args in steps:
            record = records.get(key)
            if op == "mark":
                status, overtime = args
                attendance = Attendance.objects.create(
                    date=date(2026, 2, next(days)),
                    worker=worker,
                    project=project,
                    status=status,
                    overtime_hours=Decimal(overtime),
                )
                LedgerService.post_attendance_create(attendance)
                records[key] = attendance
            elif op == "edit_attendance":
                previous = Attendance.objects.get(pk=record.pk)
                record.status = args[0]
                record.save()
                LedgerService.post_attendance_update(previous, record)
            elif op == "unmark":
                record.delete()
                LedgerService.post_attendance_delete(records.pop(key))
            elif op == "pay":
                salary = Salary(worker=worker, amount=Decimal(args[0]), date=date(2026, 3, 10))

                def create():
                    salary.save()
                    LedgerService.post_salary_create(salary)

                if self.write_salary(create):
                    records[key] = salary
            elif op == "edit_pay" and record is not None:
                previous = Salary.objects.get(pk=record.pk)

                def edit():
                    record.amount = Decimal(args[0])
                    record.save()
                    LedgerService.post_salary_update(previous, record)

                if not self.write_salary(edit):
                    record.refresh_from_db()
            elif op == "unpay" and record is not None:
                record.delete()
                LedgerService.post_salary_delete(records.pop(key))
            elif op == "buy":
                quantity, unit_price = args
                material = Material.objects.create(
                    name=key,
                    category="cement",
                    quantity=Decimal(quantity),
                    unit_price=Decimal(unit_price),
                    project=project,
                )
                LedgerService.post_material_create(material)
                records[key] = material
            elif op == "edit_buy":
                previous = Material.objects.get(pk=record.pk)
                record.quantity = Decimal(args[0])
                record.save()
                LedgerService.post_material_update(previous, record)
            elif op == "unbuy":
                record.delete()
                LedgerService.post_material_delete(records.pop(key))

        return worker, project, records

    @staticmethod
    def write_salary(write) -> bool:
        """Run a salary write in a savepoint; a rejected payment leaves nothing behind."""
        try:
            with transaction.atomic():
                write()
        except SalaryUnderflowError:
            return False
        return True

    def assert_closed_forms(self, worker, project, policy):
        self.assertEqual(LedgerService.reconcile(), [])

        worker.refresh_from_db()
        credited = sum_amount(Attendance.objects.filter(worker=worker, ledger_posted=True), "posted_amount")
        deducted = sum_amount(Salary.objects.filter(worker=worker, ledger_posted=True), "posted_amount")
        self.assertEqual(worker.pending_salary, credited - deducted)
        if policy != UNDERFLOW_CLAMP:
            earned = sum_amount(Attendance.objects.filter(worker=worker), "earned_amount")
            paid = sum_amount(Salary.objects.filter(worker=worker), "amount")
            self.assertEqual(worker.pending_salary, earned - paid)

        project.refresh_from_db()
        spent = sum_amount(Material.objects.filter(project=project), "total_cost")
        self.assertEqual(project.current_balance, project.total_amount - spent)

    def clear(self, records):
        for record in records.values():
            record.delete()
            if isinstance(record, Attendance):
                LedgerService.post_attendance_delete(record)
            elif isinstance(record, Salary):
                LedgerService.post_salary_delete(record)
            else:
                LedgerService.post_material_delete(record)

    def test_scripts_stay_consistent_under_every_policy(self):
        for policy in sorted(UNDERFLOW_POLICIES):
            for name, steps in self.SCRIPTS.items():
                with self.subTest(policy=policy, script=name), override_settings(LEDGER_SALARY_UNDERFLOW=policy):
                    worker, project, records = self.run_script(steps, f"{policy} {name}")
                    self.assert_closed_forms(worker, project, policy)

                    self.clear(records)
                    self.assertEqual(self.reload(worker).pending_salary, Decimal("0.00"))
                    self.assertEqual(self.reload(project).current_balance, project.total_amount)
                    self.assertEqual(LedgerService.reconcile(), [])
