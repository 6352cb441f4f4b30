from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import AuditLog, Role, User
from apps.attendance.models import Attendance
from apps.projects.models import Project, ProjectOwner
from apps.salaries.models import Salary

from .models import Worker


class WorkerApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        self.worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        self.owner_role, _ = Role.objects.get_or_create(
            name=Role.Name.PROJECT_OWNER,
            defaults={"level": Role.Level.PROJECT_OWNER},
        )

        self.ravi = Worker.objects.create(
            name="Ravi",
            phone="+910000000010",
            role="mason",
            address="Street 10",
            daily_salary=Decimal("800.00"),
        )
        self.anil = Worker.objects.create(
            name="Anil",
            phone="+910000000011",
            role="electrician",
            address="Street 11",
            daily_salary=Decimal("900.00"),
            is_active=False,
        )

        self.admin = User.objects.create_user(username="admin_workers", password="StrongPass123!", role=self.admin_role)
        self.worker_user = User.objects.create_user(
            username="ravi",
            password="StrongPass123!",
            role=self.worker_role,
            worker=self.ravi,
        )

    def _payload(self, **overrides):
        payload = {
            "name": "  Suresh ",
            "phone": "+910000000012",
            "role": "carpenter",
            "address": "Street 12",
            "daily_salary": "700.00",
        }
        payload.update(overrides)
        return payload

    def test_admin_creates_worker_with_zero_pending_salary(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/workers/", self._payload(), format="json")

        self.assertEqual(response.status_code, 201)
        worker = Worker.objects.get(phone="+910000000012")
        self.assertEqual(worker.name, "Suresh")
        self.assertEqual(worker.pending_salary, Decimal("0.00"))
        self.assertEqual(worker.payment_status, Worker.PaymentStatus.PENDING)
        self.assertTrue(AuditLog.objects.filter(action="worker_created", object_id=str(worker.id)).exists())

    def test_pending_salary_is_read_only(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/workers/", self._payload(pending_salary="5000"), format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Worker.objects.get(phone="+910000000012").pending_salary, Decimal("0.00"))

    def test_duplicate_phone_is_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/workers/", self._payload(phone=self.ravi.phone), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("phone", response.data)

    def test_worker_role_cannot_create(self):
        self.client.force_authenticate(user=self.worker_user)
        response = self.client.post("/api/v1/workers/", self._payload(), format="json")
        self.assertEqual(response.status_code, 403)

    def test_anonymous_is_rejected(self):
        response = self.client.get("/api/v1/workers/")
        self.assertEqual(response.status_code, 401)

    def test_list_search_and_active_filter(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/workers/", {"search": "electric"})
        self.assertEqual([row["name"] for row in response.data], ["Anil"])

        response = self.client.get("/api/v1/workers/", {"is_active": "true"})
        self.assertEqual([row["name"] for row in response.data], ["Ravi"])

    def test_worker_sees_only_themself(self):
        self.client.force_authenticate(user=self.worker_user)

        response = self.client.get("/api/v1/workers/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["id"] for row in response.data], [self.ravi.id])

        response = self.client.get(f"/api/v1/workers/{self.anil.id}/")
        self.assertEqual(response.status_code, 404)

    def test_owner_sees_workers_assigned_to_their_projects(self):
        owner = ProjectOwner.objects.create(
            name="Owner",
            email="owner@example.com",
            phone="+910000000013",
            address="Street 13",
            total_project_value=Decimal("1000.00"),
        )
        project = Project.objects.create(name="House", owner=owner, total_amount=Decimal("1000.00"))
        project.assigned_workers.add(self.anil)
        owner_user = User.objects.create_user(
            username="owner_user",
            password="StrongPass123!",
            role=self.owner_role,
            project_owner=owner,
        )
        self.client.force_authenticate(user=owner_user)

        response = self.client.get("/api/v1/workers/")
        self.assertEqual([row["id"] for row in response.data], [self.anil.id])

    def test_detail_not_found(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/workers/999999/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["detail"], "Worker not found.")

    @patch("apps.workers.views.WorkerAuditService.log_updated")
    def test_patch_keeps_pending_salary(self, log_updated):
        Worker.objects.filter(pk=self.ravi.pk).update(pending_salary=Decimal("1200.00"))
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(f"/api/v1/workers/{self.ravi.id}/", {"daily_salary": "950.00"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.ravi.refresh_from_db()
        self.assertEqual(self.ravi.daily_salary, Decimal("950.00"))
        self.assertEqual(self.ravi.pending_salary, Decimal("1200.00"))
        log_updated.assert_called_once()

    def test_delete_worker_without_history(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/v1/workers/{self.anil.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Worker removed")
        self.assertFalse(Worker.objects.filter(pk=self.anil.pk).exists())

    def test_delete_blocked_by_attendance(self):
        owner = ProjectOwner.objects.create(
            name="Owner",
            email="owner2@example.com",
            phone="+910000000014",
            address="Street 14",
            total_project_value=Decimal("1000.00"),
        )
        project = Project.objects.create(name="Shed", owner=owner, total_amount=Decimal("1000.00"))
        Attendance.objects.create(date=date(2026, 3, 1), worker=self.ravi, project=project)
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(f"/api/v1/workers/{self.ravi.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Worker.objects.filter(pk=self.ravi.pk).exists())
        self.assertTrue(AuditLog.objects.filter(action="worker_delete_blocked").exists())

    def test_worker_history_endpoints(self):
        Salary.objects.create(worker=self.ravi, amount=Decimal("100.00"), date=date(2026, 3, 2))
        self.client.force_authenticate(user=self.worker_user)

        response = self.client.get(f"/api/v1/workers/{self.ravi.id}/salaries/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

        response = self.client.get(f"/api/v1/workers/{self.ravi.id}/attendance/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, [])

        response = self.client.get(f"/api/v1/workers/{self.anil.id}/salaries/")
        self.assertEqual(response.status_code, 404)
