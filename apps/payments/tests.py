from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import Role, User
from apps.projects.models import Project, ProjectOwner

from .models import Payment
from .services import create_payment


class PaymentApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        owner_role, _ = Role.objects.get_or_create(
            name=Role.Name.PROJECT_OWNER,
            defaults={"level": Role.Level.PROJECT_OWNER},
        )
        self.admin = User.objects.create_user(username="admin_payments", password="StrongPass123!", role=admin_role)

        self.owner = ProjectOwner.objects.create(
            name="Meera",
            email="meera@example.com",
            phone="+910000000060",
            address="Street 60",
            total_project_value=Decimal("100000.00"),
        )
        self.other_owner = ProjectOwner.objects.create(
            name="Kiran",
            email="kiran@example.com",
            phone="+910000000061",
            address="Street 61",
            total_project_value=Decimal("60000.00"),
        )
        self.project = Project.objects.create(name="Villa", owner=self.owner, total_amount=Decimal("100000.00"))
        self.other_project = Project.objects.create(
            name="Garage",
            owner=self.other_owner,
            total_amount=Decimal("60000.00"),
        )
        self.owner_user = User.objects.create_user(
            username="meera",
            password="StrongPass123!",
            role=owner_role,
            project_owner=self.owner,
        )

    def _post(self, **payload):
        self.client.force_authenticate(user=self.admin)
        return self.client.post("/api/v1/payments/", payload, format="json")

    def test_owner_defaults_from_project(self):
        response = self._post(project=self.project.id, amount="30000.00", date="2026-03-01")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["project_owner"], self.owner.id)
        self.assertEqual(response.data["project_owner_name"], "Meera")
        self.project.refresh_from_db()
        self.owner.refresh_from_db()
        self.assertEqual(self.project.paid_amount, Decimal("30000.00"))
        self.assertEqual(self.project.pending_amount, Decimal("70000.00"))
        self.assertEqual(self.owner.balance_amount, Decimal("70000.00"))

    def test_owner_only_advance(self):
        response = self._post(project_owner=self.owner.id, amount="5000.00", is_advance=True)

        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.data["project_name"])
        self.project.refresh_from_db()
        self.owner.refresh_from_db()
        self.assertEqual(self.project.paid_amount, Decimal("0.00"))
        self.assertEqual(self.owner.paid_amount, Decimal("5000.00"))

    def test_requires_project_or_owner(self):
        response = self._post(amount="10.00")

        self.assertEqual(response.status_code, 400)
        self.assertIn("project", response.data)

    def test_mismatched_owner_is_rejected(self):
        response = self._post(project=self.project.id, project_owner=self.other_owner.id, amount="10.00")

        self.assertEqual(response.status_code, 400)
        self.assertIn("project_owner", response.data)
        self.assertFalse(Payment.objects.exists())

    def test_negative_amount_is_rejected(self):
        response = self._post(project=self.project.id, amount="-1.00")
        self.assertEqual(response.status_code, 400)

    def test_move_payment_to_another_project(self):
        payment_id = self._post(project=self.project.id, amount="10000.00").data["id"]

        response = self.client.patch(
            f"/api/v1/payments/{payment_id}/",
            {"project": self.other_project.id},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["project_owner"], self.other_owner.id)
        for obj in (self.project, self.other_project, self.owner, self.other_owner):
            obj.refresh_from_db()
        self.assertEqual(self.project.paid_amount, Decimal("0.00"))
        self.assertEqual(self.other_project.paid_amount, Decimal("10000.00"))
        self.assertEqual(self.owner.paid_amount, Decimal("0.00"))
        self.assertEqual(self.other_owner.paid_amount, Decimal("10000.00"))
        self.assertEqual(self.other_owner.balance_amount, Decimal("50000.00"))

    def test_delete_reverses_credit(self):
        payment_id = self._post(project=self.project.id, amount="10000.00").data["id"]

        response = self.client.delete(f"/api/v1/payments/{payment_id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Payment removed")
        self.project.refresh_from_db()
        self.assertEqual(self.project.paid_amount, Decimal("0.00"))
        self.assertEqual(self.project.pending_amount, Decimal("100000.00"))

    def test_list_filters_and_owner_scope(self):
        create_payment(project=self.project, amount=Decimal("100.00"))
        create_payment(project=self.other_project, amount=Decimal("200.00"))

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/payments/", {"project_owner_id": self.other_owner.id})
        self.assertEqual([row["project"] for row in response.data], [self.other_project.id])

        self.client.force_authenticate(user=self.owner_user)
        response = self.client.get("/api/v1/payments/")
        self.assertEqual([row["project"] for row in response.data], [self.project.id])
        self.assertEqual(self.client.post("/api/v1/payments/", {}, format="json").status_code, 403)

    def test_not_found(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete("/api/v1/payments/999999/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["detail"], "Payment not found.")
