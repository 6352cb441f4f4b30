from datetime import date
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import Role, User
from apps.attendance.models import Attendance
from apps.ledger.services import LedgerService
from apps.projects.models import Project, ProjectOwner
from apps.workers.models import Worker

from .models import Salary


class SalaryApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        owner_role, _ = Role.objects.get_or_create(
            name=Role.Name.PROJECT_OWNER,
            defaults={"level": Role.Level.PROJECT_OWNER},
        )
        self.admin = User.objects.create_user(username="admin_salaries", password="StrongPass123!", role=admin_role)

        self.owner = ProjectOwner.objects.create(
            name="Owner",
            email="owner@example.com",
            phone="+910000000050",
            address="Street 50",
            total_project_value=Decimal("100000.00"),
        )
        self.project = Project.objects.create(name="Villa", owner=self.owner, total_amount=Decimal("100000.00"))
        self.worker = Worker.objects.create(
            name="Ravi",
            phone="+910000000051",
            role="mason",
            address="Street 51",
            daily_salary=Decimal("800.00"),
        )
        for day in (1, 2):
            attendance = Attendance.objects.create(date=date(2026, 3, day), worker=self.worker, project=self.project)
            LedgerService.post_attendance_create(attendance)

        self.worker_user = User.objects.create_user(
            username="ravi",
            password="StrongPass123!",
            role=worker_role,
            worker=self.worker,
        )
        self.owner_user = User.objects.create_user(
            username="owner_salaries",
            password="StrongPass123!",
            role=owner_role,
            project_owner=self.owner,
        )

    def _pay(self, amount, **overrides):
        payload = {
            "worker": self.worker.id,
            "project": self.project.id,
            "amount": amount,
            "date": "2026-03-05",
            "payment_method": "upi",
        }
        payload.update(overrides)
        self.client.force_authenticate(user=self.admin)
        return self.client.post("/api/v1/salaries/", payload, format="json")

    def test_payment_debits_pending_salary(self):
        response = self._pay("600.00")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["worker_name"], "Ravi")
        self.assertEqual(response.data["project_name"], "Villa")
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.pending_salary, Decimal("1000.00"))
        self.assertEqual(self.worker.payment_status, Worker.PaymentStatus.PARTIAL)

    def test_full_payment_marks_worker_paid(self):
        self._pay("1600.00")
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.pending_salary, Decimal("0.00"))
        self.assertEqual(self.worker.payment_status, Worker.PaymentStatus.PAID)

    def test_salary_without_project(self):
        response = self._pay("100.00", project=None)

        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.data["project_name"])

    def test_overpayment_is_clamped_by_default(self):
        response = self._pay("2000.00")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.data["posted_amount"]), Decimal("1600.00"))
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.pending_salary, Decimal("0.00"))

    @override_settings(LEDGER_SALARY_UNDERFLOW="error")
    def test_overpayment_is_refused_under_error_policy(self):
        response = self._pay("2000.00")

        self.assertEqual(response.status_code, 400)
        self.assertIn("exceeds pending salary", response.data["detail"])
        self.assertFalse(Salary.objects.exists())
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.pending_salary, Decimal("1600.00"))

    def test_period_end_before_start_is_rejected(self):
        response = self._pay("100.00", period_start="2026-03-10", period_end="2026-03-01")
        self.assertEqual(response.status_code, 400)
        self.assertIn("period_end", response.data)

    def test_amount_edit_applies_difference(self):
        salary_id = self._pay("600.00").data["id"]

        response = self.client.patch(f"/api/v1/salaries/{salary_id}/", {"amount": "1000.00"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.pending_salary, Decimal("600.00"))

    def test_delete_restores_pending_and_status(self):
        salary_id = self._pay("600.00").data["id"]

        response = self.client.delete(f"/api/v1/salaries/{salary_id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Salary removed")
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.pending_salary, Decimal("1600.00"))
        self.assertEqual(self.worker.payment_status, Worker.PaymentStatus.PENDING)

    def test_not_found(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/salaries/999999/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["detail"], "Salary not found.")

    def test_worker_reads_own_salaries_and_owner_sees_none(self):
        self._pay("100.00")

        self.client.force_authenticate(user=self.worker_user)
        response = self.client.get("/api/v1/salaries/")
        self.assertEqual(len(response.data), 1)
        self.assertEqual(self.client.post("/api/v1/salaries/", {}, format="json").status_code, 403)

        self.client.force_authenticate(user=self.owner_user)
        self.assertEqual(self.client.get("/api/v1/salaries/").data, [])
