from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import Role, User
from apps.projects.models import Project, ProjectOwner
from apps.workers.models import Worker

from .models import Material


class MaterialApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        owner_role, _ = Role.objects.get_or_create(
            name=Role.Name.PROJECT_OWNER,
            defaults={"level": Role.Level.PROJECT_OWNER},
        )
        self.admin = User.objects.create_user(username="admin_materials", password="StrongPass123!", role=admin_role)

        self.owner = ProjectOwner.objects.create(
            name="Owner",
            email="owner@example.com",
            phone="+910000000030",
            address="Street 30",
            total_project_value=Decimal("100000.00"),
        )
        other_owner = ProjectOwner.objects.create(
            name="Other",
            email="other@example.com",
            phone="+910000000031",
            address="Street 31",
            total_project_value=Decimal("100000.00"),
        )
        self.project = Project.objects.create(name="Villa", owner=self.owner, total_amount=Decimal("100000.00"))
        self.other_project = Project.objects.create(name="Shop", owner=other_owner, total_amount=Decimal("80000.00"))

        self.owner_user = User.objects.create_user(
            username="owner_materials",
            password="StrongPass123!",
            role=owner_role,
            project_owner=self.owner,
        )
        worker = Worker.objects.create(
            name="Ravi",
            phone="+910000000032",
            role="mason",
            address="Street 32",
            daily_salary=Decimal("800.00"),
        )
        self.worker_user = User.objects.create_user(
            username="worker_materials",
            password="StrongPass123!",
            role=worker_role,
            worker=worker,
        )

    def _create(self, **overrides):
        payload = {
            "name": "Cement",
            "category": "cement",
            "quantity": "10",
            "unit_price": "50.00",
            "project": self.project.id,
        }
        payload.update(overrides)
        self.client.force_authenticate(user=self.admin)
        return self.client.post("/api/v1/materials/", payload, format="json")

    def test_create_debits_project_balance(self):
        response = self._create()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.data["total_cost"]), Decimal("500.00"))
        self.assertTrue(response.data["ledger_posted"])
        self.project.refresh_from_db()
        self.assertEqual(self.project.current_balance, Decimal("99500.00"))

    def test_total_cost_is_server_computed(self):
        response = self._create(total_cost="1.00")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.data["total_cost"]), Decimal("500.00"))

    def test_zero_quantity_is_rejected(self):
        response = self._create(quantity="0")

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Material.objects.exists())

    def test_unknown_project_is_rejected(self):
        response = self._create(project=999999)

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Material.objects.exists())

    def test_quantity_edit_applies_difference(self):
        material_id = self._create().data["id"]

        response = self.client.patch(f"/api/v1/materials/{material_id}/", {"quantity": "20"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.data["total_cost"]), Decimal("1000.00"))
        self.project.refresh_from_db()
        self.assertEqual(self.project.current_balance, Decimal("99000.00"))

    def test_moving_material_between_projects(self):
        material_id = self._create().data["id"]

        response = self.client.patch(
            f"/api/v1/materials/{material_id}/",
            {"project": self.other_project.id},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.project.refresh_from_db()
        self.other_project.refresh_from_db()
        self.assertEqual(self.project.current_balance, Decimal("100000.00"))
        self.assertEqual(self.other_project.current_balance, Decimal("79500.00"))

    def test_delete_restores_balance(self):
        material_id = self._create().data["id"]

        response = self.client.delete(f"/api/v1/materials/{material_id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Material removed")
        self.project.refresh_from_db()
        self.assertEqual(self.project.current_balance, Decimal("100000.00"))
        self.assertEqual(self.client.delete(f"/api/v1/materials/{material_id}/").status_code, 404)

    def test_list_filters_and_owner_scope(self):
        self._create()
        self._create(name="Tiles", category="Flooring", project=self.other_project.id)

        response = self.client.get("/api/v1/materials/", {"category": "flooring"})
        self.assertEqual([row["name"] for row in response.data], ["Tiles"])

        response = self.client.get("/api/v1/materials/", {"project_id": self.project.id})
        self.assertEqual([row["name"] for row in response.data], ["Cement"])

        self.client.force_authenticate(user=self.owner_user)
        response = self.client.get("/api/v1/materials/")
        self.assertEqual([row["project"] for row in response.data], [self.project.id])

    def test_worker_role_cannot_create_or_list(self):
        self.client.force_authenticate(user=self.worker_user)

        response = self.client.post(
            "/api/v1/materials/",
            {"name": "Sand", "category": "sand", "quantity": "1", "unit_price": "1", "project": self.project.id},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get("/api/v1/materials/").data, [])
