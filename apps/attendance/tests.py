from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import AuditLog, Role, User
from apps.projects.models import Project, ProjectOwner
from apps.workers.models import Worker

from .models import Attendance
from .services import attendance_report
from .views import DUPLICATE_DETAIL


class AttendanceApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        self.admin = User.objects.create_user(username="admin_attendance", password="StrongPass123!", role=admin_role)

        owner = ProjectOwner.objects.create(
            name="Owner",
            email="owner@example.com",
            phone="+910000000040",
            address="Street 40",
            total_project_value=Decimal("100000.00"),
        )
        self.project = Project.objects.create(name="Villa", owner=owner, total_amount=Decimal("100000.00"))
        self.ravi = Worker.objects.create(
            name="Ravi",
            phone="+910000000041",
            role="mason",
            address="Street 41",
            daily_salary=Decimal("800.00"),
        )
        self.anil = Worker.objects.create(
            name="Anil",
            phone="+910000000042",
            role="helper",
            address="Street 42",
            daily_salary=Decimal("400.00"),
        )
        self.worker_user = User.objects.create_user(
            username="ravi",
            password="StrongPass123!",
            role=worker_role,
            worker=self.ravi,
        )

    def _mark(self, worker=None, day="2026-03-01", **overrides):
        payload = {
            "date": day,
            "worker": (worker or self.ravi).id,
            "project": self.project.id,
            "status": "present",
            "overtime_hours": "0",
        }
        payload.update(overrides)
        self.client.force_authenticate(user=self.admin)
        return self.client.post("/api/v1/attendance/", payload, format="json")

    def test_present_with_overtime_credits_worker(self):
        response = self._mark(overtime_hours="2")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.data["earned_amount"]), Decimal("1000.00"))
        self.ravi.refresh_from_db()
        self.assertEqual(self.ravi.pending_salary, Decimal("1000.00"))
        self.assertEqual(self.ravi.payment_status, Worker.PaymentStatus.PENDING)

    def test_absent_credits_nothing(self):
        response = self._mark(status="absent")

        self.assertEqual(response.status_code, 201)
        self.ravi.refresh_from_db()
        self.assertEqual(self.ravi.pending_salary, Decimal("0.00"))

    def test_duplicate_day_is_rejected_once(self):
        self.assertEqual(self._mark().status_code, 201)

        response = self._mark(status="halfday")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], DUPLICATE_DETAIL)
        self.assertEqual(Attendance.objects.filter(worker=self.ravi).count(), 1)
        self.ravi.refresh_from_db()
        self.assertEqual(self.ravi.pending_salary, Decimal("800.00"))
        self.assertTrue(AuditLog.objects.filter(action="attendance_duplicate_rejected").exists())

    def test_same_day_for_another_worker_is_allowed(self):
        self._mark()
        self.assertEqual(self._mark(worker=self.anil).status_code, 201)

    def test_unknown_status_is_rejected(self):
        response = self._mark(status="sick")
        self.assertEqual(response.status_code, 400)
        self.assertIn("status", response.data)

    def test_status_change_applies_difference(self):
        attendance_id = self._mark().data["id"]

        response = self.client.patch(f"/api/v1/attendance/{attendance_id}/", {"status": "halfday"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.ravi.refresh_from_db()
        self.assertEqual(self.ravi.pending_salary, Decimal("400.00"))

    def test_update_into_existing_day_is_rejected(self):
        self._mark(day="2026-03-01")
        second_id = self._mark(day="2026-03-02").data["id"]

        response = self.client.patch(f"/api/v1/attendance/{second_id}/", {"date": "2026-03-01"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], DUPLICATE_DETAIL)
        self.assertEqual(Attendance.objects.get(pk=second_id).date, date(2026, 3, 2))

    def test_reassigning_worker_moves_earning(self):
        attendance_id = self._mark().data["id"]

        response = self.client.patch(f"/api/v1/attendance/{attendance_id}/", {"worker": self.anil.id}, format="json")

        self.assertEqual(response.status_code, 200)
        self.ravi.refresh_from_db()
        self.anil.refresh_from_db()
        self.assertEqual(self.ravi.pending_salary, Decimal("0.00"))
        self.assertEqual(self.anil.pending_salary, Decimal("400.00"))

    @patch("apps.attendance.views.AttendanceAuditService.log_deleted")
    def test_delete_reverses_credit(self, log_deleted):
        attendance_id = self._mark(overtime_hours="4").data["id"]

        response = self.client.delete(f"/api/v1/attendance/{attendance_id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Attendance removed")
        self.ravi.refresh_from_db()
        self.assertEqual(self.ravi.pending_salary, Decimal("0.00"))
        log_deleted.assert_called_once()

    def test_worker_sees_only_own_records(self):
        self._mark()
        self._mark(worker=self.anil)
        self.client.force_authenticate(user=self.worker_user)

        response = self.client.get("/api/v1/attendance/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["worker"] for row in response.data], [self.ravi.id])
        self.assertEqual(self.client.post("/api/v1/attendance/", {}, format="json").status_code, 403)

    def test_list_date_range_filter(self):
        self._mark(day="2026-03-01")
        self._mark(day="2026-03-10")

        response = self.client.get("/api/v1/attendance/", {"start_date": "2026-03-05", "end_date": "2026-03-31"})
        self.assertEqual([row["date"] for row in response.data], ["2026-03-10"])

    def test_report_grouped_by_worker(self):
        self._mark(day="2026-03-01", overtime_hours="2")
        self._mark(day="2026-03-02", status="halfday")
        self._mark(day="2026-03-03", status="absent")
        self._mark(worker=self.anil, day="2026-03-01")

        response = self.client.get(
            "/api/v1/attendance/report/",
            {"start_date": "2026-03-01", "end_date": "2026-03-31", "group_by": "worker"},
        )

        self.assertEqual(response.status_code, 200)
        rows = {row["label"]: row for row in response.data["rows"]}
        self.assertEqual(rows["Ravi"]["present"], 1)
        self.assertEqual(rows["Ravi"]["halfday"], 1)
        self.assertEqual(rows["Ravi"]["absent"], 1)
        self.assertEqual(rows["Ravi"]["total"], 3)
        self.assertEqual(Decimal(rows["Ravi"]["earned_amount"]), Decimal("1400.00"))
        self.assertEqual(Decimal(rows["Anil"]["earned_amount"]), Decimal("400.00"))

    def test_report_requires_date_range(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/attendance/report/", {"group_by": "date"})
        self.assertEqual(response.status_code, 400)


class AttendanceReportServiceTests(TestCase):
    def test_group_by_date_with_no_rows(self):
        self.assertEqual(attendance_report(Attendance.objects.all(), "date"), [])
