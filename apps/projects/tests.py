from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import Role, User
from apps.ledger.services import LedgerService
from apps.materials.models import Material
from apps.payments.models import Payment
from apps.salaries.models import Salary
from apps.workers.models import Worker

from .models import Project, ProjectOwner


class ProjectApiTestBase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        self.worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        self.owner_role, _ = Role.objects.get_or_create(
            name=Role.Name.PROJECT_OWNER,
            defaults={"level": Role.Level.PROJECT_OWNER},
        )
        self.admin = User.objects.create_user(username="admin_projects", password="StrongPass123!", role=self.admin_role)

        self.owner = ProjectOwner.objects.create(
            name="Meera",
            email="meera@example.com",
            phone="+910000000020",
            address="Street 20",
            company="Meera Homes",
            total_project_value=Decimal("150000.00"),
        )
        self.other_owner = ProjectOwner.objects.create(
            name="Kiran",
            email="kiran@example.com",
            phone="+910000000021",
            address="Street 21",
            total_project_value=Decimal("50000.00"),
        )
        self.project = Project.objects.create(
            name="Villa",
            owner=self.owner,
            total_amount=Decimal("100000.00"),
            status=Project.Status.IN_PROGRESS,
        )
        self.other_project = Project.objects.create(
            name="Garage",
            owner=self.other_owner,
            total_amount=Decimal("50000.00"),
        )
        self.worker = Worker.objects.create(
            name="Ravi",
            phone="+910000000022",
            role="mason",
            address="Street 22",
            daily_salary=Decimal("800.00"),
        )
        self.owner_user = User.objects.create_user(
            username="meera",
            password="StrongPass123!",
            role=self.owner_role,
            project_owner=self.owner,
        )


class ProjectOwnerApiTests(ProjectApiTestBase):
    def test_create_owner_normalizes_email_and_balance(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/project-owners/",
            {
                "name": "Dev",
                "email": "Dev@Example.COM",
                "phone": "+910000000023",
                "address": "Street 23",
                "total_project_value": "40000.00",
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        owner = ProjectOwner.objects.get(phone="+910000000023")
        self.assertEqual(owner.email, "dev@example.com")
        self.assertEqual(owner.paid_amount, Decimal("0.00"))
        self.assertEqual(owner.balance_amount, Decimal("40000.00"))

    def test_email_uniqueness_is_case_insensitive(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/project-owners/",
            {
                "name": "Copy",
                "email": "MEERA@example.com",
                "phone": "+910000000024",
                "address": "Street 24",
                "total_project_value": "1.00",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("email", response.data)

    def test_search_owners(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/project-owners/", {"search": "homes"})
        self.assertEqual([row["id"] for row in response.data], [self.owner.id])

    def test_options_are_scoped(self):
        self.client.force_authenticate(user=self.owner_user)
        response = self.client.get("/api/v1/project-owners/options/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, [
            {"id": self.owner.id, "name": "Meera", "company": "Meera Homes", "email": "meera@example.com"},
        ])

    def test_owner_cannot_read_another_owner(self):
        self.client.force_authenticate(user=self.owner_user)
        response = self.client.get(f"/api/v1/project-owners/{self.other_owner.id}/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["detail"], "Project owner not found.")

    def test_update_total_value_recomputes_balance(self):
        ProjectOwner.objects.filter(pk=self.owner.pk).update(paid_amount=Decimal("20000.00"))
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(
            f"/api/v1/project-owners/{self.owner.id}/",
            {"total_project_value": "160000.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.owner.refresh_from_db()
        self.assertEqual(self.owner.paid_amount, Decimal("20000.00"))
        self.assertEqual(self.owner.balance_amount, Decimal("140000.00"))

    def test_delete_owner_with_projects_is_blocked(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/v1/project-owners/{self.owner.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(ProjectOwner.objects.filter(pk=self.owner.pk).exists())

    def test_delete_owner_without_history(self):
        lonely = ProjectOwner.objects.create(
            name="Solo",
            email="solo@example.com",
            phone="+910000000025",
            address="Street 25",
            total_project_value=Decimal("0.00"),
        )
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/v1/project-owners/{lonely.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Project owner removed")

    def test_owner_projects_summary_sorted(self):
        Project.objects.create(name="Annex", owner=self.owner, total_amount=Decimal("20000.00"))
        self.client.force_authenticate(user=self.owner_user)

        response = self.client.get(f"/api/v1/project-owners/{self.owner.id}/projects/", {"sort": "-total_amount"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_projects"], 2)
        self.assertEqual(Decimal(str(response.data["total_amount"])), Decimal("120000.00"))
        self.assertEqual([row["name"] for row in response.data["projects"]], ["Villa", "Annex"])

    def test_owner_projects_rejects_unknown_sort(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(f"/api/v1/project-owners/{self.owner.id}/projects/", {"sort": "owner__password"})
        self.assertEqual(response.status_code, 400)


class ProjectApiTests(ProjectApiTestBase):
    def test_create_project_starts_with_full_balance(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/projects/",
            {
                "name": "Tower",
                "owner": self.owner.id,
                "total_amount": "250000.00",
                "assigned_workers": [self.worker.id],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        project = Project.objects.get(name="Tower")
        self.assertEqual(project.current_balance, Decimal("250000.00"))
        self.assertEqual(project.pending_amount, Decimal("250000.00"))
        self.assertEqual(project.paid_amount, Decimal("0.00"))
        self.assertEqual(list(project.assigned_workers.values_list("id", flat=True)), [self.worker.id])

    def test_end_date_before_start_date_is_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/projects/",
            {
                "name": "Backwards",
                "owner": self.owner.id,
                "total_amount": "10.00",
                "start_date": "2026-05-10",
                "end_date": "2026-05-01",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("end_date", response.data)

    def test_worker_cannot_create_project(self):
        worker_user = User.objects.create_user(
            username="ravi",
            password="StrongPass123!",
            role=self.worker_role,
            worker=self.worker,
        )
        self.client.force_authenticate(user=worker_user)
        response = self.client.post(
            "/api/v1/projects/",
            {"name": "Nope", "owner": self.owner.id, "total_amount": "10.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    def test_list_filters(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/projects/", {"status": Project.Status.IN_PROGRESS})
        self.assertEqual([row["id"] for row in response.data], [self.project.id])

        response = self.client.get("/api/v1/projects/", {"owner_id": self.other_owner.id})
        self.assertEqual([row["id"] for row in response.data], [self.other_project.id])

        response = self.client.get("/api/v1/projects/", {"search": "gara"})
        self.assertEqual([row["id"] for row in response.data], [self.other_project.id])

    def test_owner_and_worker_scoping(self):
        self.client.force_authenticate(user=self.owner_user)
        response = self.client.get("/api/v1/projects/")
        self.assertEqual([row["id"] for row in response.data], [self.project.id])
        self.assertEqual(self.client.get(f"/api/v1/projects/{self.other_project.id}/").status_code, 404)

        self.other_project.assigned_workers.add(self.worker)
        worker_user = User.objects.create_user(
            username="ravi",
            password="StrongPass123!",
            role=self.worker_role,
            worker=self.worker,
        )
        self.client.force_authenticate(user=worker_user)
        response = self.client.get("/api/v1/projects/")
        self.assertEqual([row["id"] for row in response.data], [self.other_project.id])

    def test_total_amount_edit_shifts_current_balance(self):
        material = Material.objects.create(
            name="Cement",
            category="cement",
            quantity=Decimal("10"),
            unit_price=Decimal("100"),
            project=self.project,
        )
        LedgerService.post_material_create(material)
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(
            f"/api/v1/projects/{self.project.id}/",
            {"total_amount": "110000.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.project.refresh_from_db()
        self.assertEqual(self.project.current_balance, Decimal("109000.00"))
        self.assertEqual(self.project.pending_amount, Decimal("110000.00"))

    def test_update_ignores_cached_fields(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(
            f"/api/v1/projects/{self.project.id}/",
            {"paid_amount": "99999.00", "current_balance": "1.00", "name": "Villa II"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.project.refresh_from_db()
        self.assertEqual(self.project.name, "Villa II")
        self.assertEqual(self.project.paid_amount, Decimal("0.00"))
        self.assertEqual(self.project.current_balance, Decimal("100000.00"))

    def test_delete_project_with_materials_is_blocked(self):
        Material.objects.create(
            name="Sand",
            category="sand",
            quantity=Decimal("1"),
            unit_price=Decimal("10"),
            project=self.project,
        )
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/v1/projects/{self.project.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "Project has materials and cannot be removed.")

    def test_delete_project(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/v1/projects/{self.other_project.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Project removed")
        self.assertFalse(Project.objects.filter(pk=self.other_project.pk).exists())

    def test_finance_summary(self):
        material = Material.objects.create(
            name="Steel",
            category="steel",
            quantity=Decimal("4"),
            unit_price=Decimal("2500"),
            project=self.project,
        )
        LedgerService.post_material_create(material)
        payment = Payment.objects.create(project=self.project, amount=Decimal("30000"))
        LedgerService.post_payment_create(payment)
        Salary.objects.create(worker=self.worker, project=self.project, amount=Decimal("5000"), date=date(2026, 3, 5))
        self.client.force_authenticate(user=self.owner_user)

        response = self.client.get(f"/api/v1/projects/{self.project.id}/finance/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(str(response.data["materials"]["total_cost"])), Decimal("10000.00"))
        self.assertEqual(Decimal(str(response.data["payments"]["total_amount"])), Decimal("30000.00"))
        self.assertEqual(Decimal(str(response.data["salaries"]["total_amount"])), Decimal("5000.00"))
        self.assertEqual(Decimal(str(response.data["total_expenses"])), Decimal("15000.00"))
        self.assertEqual(Decimal(str(response.data["net_profit"])), Decimal("15000.00"))
        self.assertEqual(response.data["salaries"]["items"][0]["worker_name"], "Ravi")
        self.assertEqual(Decimal(str(response.data["project"]["current_balance"])), Decimal("90000.00"))

    @patch("apps.projects.views.PaymentAuditService.log_created")
    def test_process_payment_credits_project_and_owner(self, log_created):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            f"/api/v1/projects/{self.project.id}/payments/",
            {"amount": "30000.00", "payment_method": "bank", "reference": "NEFT-1"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        payment = Payment.objects.get(reference="NEFT-1")
        self.assertEqual(payment.project_owner_id, self.owner.id)
        self.assertTrue(payment.ledger_posted)

        self.project.refresh_from_db()
        self.owner.refresh_from_db()
        self.assertEqual(self.project.paid_amount, Decimal("30000.00"))
        self.assertEqual(self.project.pending_amount, Decimal("70000.00"))
        self.assertEqual(self.owner.paid_amount, Decimal("30000.00"))
        self.assertEqual(self.owner.balance_amount, Decimal("120000.00"))
        log_created.assert_called_once()

    def test_process_payment_requires_admin(self):
        self.client.force_authenticate(user=self.owner_user)
        response = self.client.post(f"/api/v1/projects/{self.project.id}/payments/", {"amount": "10.00"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_process_payment_unknown_project(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/projects/999999/payments/", {"amount": "10.00"}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_assign_workers_adds_to_existing(self):
        helper = Worker.objects.create(
            name="Anil",
            phone="+910000000026",
            role="helper",
            address="Street 26",
            daily_salary=Decimal("500.00"),
        )
        self.project.assigned_workers.add(self.worker)
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            f"/api/v1/projects/{self.project.id}/workers/",
            {"worker_ids": [helper.id, helper.id]},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(sorted(response.data["assigned_workers"]), sorted([self.worker.id, helper.id]))

        response = self.client.get(f"/api/v1/projects/{self.project.id}/workers/")
        self.assertEqual([row["name"] for row in response.data], ["Anil", "Ravi"])

    def test_assign_unknown_worker_is_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            f"/api/v1/projects/{self.project.id}/workers/",
            {"worker_ids": [999999]},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.project.assigned_workers.count(), 0)
