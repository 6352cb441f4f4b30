from datetime import date
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import Role, User
from apps.attendance.models import Attendance
from apps.ledger.services import LedgerService
from apps.materials.models import Material
from apps.payments.services import create_payment
from apps.projects.models import Project, ProjectOwner
from apps.salaries.models import Salary
from apps.workers.models import Worker

from .services import recent_activities, salary_report, worker_performance


class ReportsTestBase(TestCase):
    def setUp(self):
        self.client = APIClient()
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        self.admin = User.objects.create_user(username="admin_reports", password="StrongPass123!", role=admin_role)

        self.owner = ProjectOwner.objects.create(
            name="Meera",
            email="meera@example.com",
            phone="+910000000070",
            address="Street 70",
            total_project_value=Decimal("120000.00"),
        )
        self.villa = Project.objects.create(
            name="Villa",
            owner=self.owner,
            total_amount=Decimal("100000.00"),
            status=Project.Status.IN_PROGRESS,
        )
        self.shed = Project.objects.create(name="Shed", owner=self.owner, total_amount=Decimal("20000.00"))
        self.ravi = Worker.objects.create(
            name="Ravi",
            phone="+910000000071",
            role="mason",
            address="Street 71",
            daily_salary=Decimal("800.00"),
        )
        self.anil = Worker.objects.create(
            name="Anil",
            phone="+910000000072",
            role="helper",
            address="Street 72",
            daily_salary=Decimal("400.00"),
        )
        self.worker_user = User.objects.create_user(
            username="ravi",
            password="StrongPass123!",
            role=worker_role,
            worker=self.ravi,
        )

        for day, status in ((1, "present"), (2, "halfday"), (3, "absent"), (4, "present")):
            self._attend(self.ravi, date(2026, 3, day), status)

        material = Material.objects.create(
            name="Steel",
            category="steel",
            quantity=Decimal("3"),
            unit_price=Decimal("5000.00"),
            project=self.shed,
            purchase_date=date(2026, 3, 2),
        )
        LedgerService.post_material_create(material)

        create_payment(project=self.villa, amount=Decimal("40000.00"), date=date(2026, 3, 3))
        self._salary(self.ravi, "1000.00", date(2026, 3, 5), project=self.villa)
        self._salary(self.ravi, "500.00", date(2026, 4, 2))

    def _attend(self, worker, day, status):
        attendance = Attendance.objects.create(date=day, worker=worker, project=self.villa, status=status)
        LedgerService.post_attendance_create(attendance)
        return attendance

    def _salary(self, worker, amount, day, project=None):
        salary = Salary.objects.create(worker=worker, project=project, amount=Decimal(amount), date=day)
        LedgerService.post_salary_create(salary)
        return salary


class ReportsApiTests(ReportsTestBase):
    def test_reports_are_admin_only(self):
        self.client.force_authenticate(user=self.worker_user)
        for path in (
            "/api/v1/reports/dashboard/",
            "/api/v1/reports/recent-activities/",
            "/api/v1/reports/upcoming-payments/",
            "/api/v1/reports/financial/",
            "/api/v1/reports/worker-performance/",
            "/api/v1/reports/salaries/?start_date=2026-03-01&end_date=2026-04-30",
        ):
            self.assertEqual(self.client.get(path).status_code, 403, path)

    def test_dashboard(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/reports/dashboard/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_projects"], 2)
        self.assertEqual(response.data["active_projects"], 1)
        self.assertEqual(response.data["total_workers"], 2)
        self.assertEqual(response.data["total_owners"], 1)
        self.assertEqual(Decimal(response.data["total_materials_cost"]), Decimal("15000.00"))
        self.assertEqual(Decimal(response.data["total_payments"]), Decimal("40000.00"))
        self.assertEqual(Decimal(response.data["total_salaries"]), Decimal("1500.00"))
        # 800 + 400 + 0 + 800 earned, 1500 paid
        self.assertEqual(Decimal(response.data["pending_salaries"]), Decimal("500.00"))

    def test_recent_activities_newest_first(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/reports/recent-activities/", {"limit": 3})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 3)
        dates = [item["date"] for item in response.data]
        self.assertEqual(dates, sorted(dates, reverse=True))
        self.assertEqual({item["type"] for item in response.data} - {"payment", "salary", "attendance"}, set())

    def test_recent_activities_rejects_bad_limit(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/reports/recent-activities/", {"limit": 0})
        self.assertEqual(response.status_code, 400)

    @override_settings(LOW_BALANCE_THRESHOLD=10000)
    def test_upcoming_payments(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/reports/upcoming-payments/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["worker_id"] for row in response.data["pending_salaries"]], [self.ravi.id])
        self.assertEqual([row["project_id"] for row in response.data["low_balance_projects"]], [self.shed.id])
        self.assertEqual(response.data["low_balance_projects"][0]["owner"]["name"], "Meera")

    def test_financial_report_with_range(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/reports/financial/", {"start_date": "2026-03-01", "end_date": "2026-03-31"})

        self.assertEqual(response.status_code, 200)
        summary = response.data["summary"]
        self.assertEqual(Decimal(summary["total_material_cost"]), Decimal("15000.00"))
        self.assertEqual(Decimal(summary["total_payment_amount"]), Decimal("40000.00"))
        self.assertEqual(Decimal(summary["total_salary_amount"]), Decimal("1000.00"))
        self.assertEqual(Decimal(summary["net_profit"]), Decimal("24000.00"))

        rows = {row["project"]["name"]: row for row in response.data["project_financials"]}
        self.assertEqual(Decimal(rows["Villa"]["net_profit"]), Decimal("39000.00"))
        self.assertEqual(Decimal(rows["Shed"]["expenses"]), Decimal("15000.00"))

    def test_financial_report_rejects_reversed_range(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/reports/financial/", {"start_date": "2026-03-31", "end_date": "2026-03-01"})
        self.assertEqual(response.status_code, 400)

    def test_worker_performance(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/reports/worker-performance/")

        self.assertEqual(response.status_code, 200)
        rows = {row["worker"]["name"]: row for row in response.data}
        self.assertEqual(rows["Ravi"]["attendance"]["total"], 4)
        self.assertEqual(Decimal(rows["Ravi"]["attendance"]["percentage"]), Decimal("62.50"))
        self.assertEqual(Decimal(rows["Ravi"]["salary"]["earned"]), Decimal("2000.00"))
        self.assertEqual(Decimal(rows["Ravi"]["salary"]["paid"]), Decimal("1500.00"))
        self.assertEqual(rows["Anil"]["attendance"]["total"], 0)
        self.assertEqual(Decimal(rows["Anil"]["attendance"]["percentage"]), Decimal("0.00"))

    def test_salary_report_requires_range(self):
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get("/api/v1/reports/salaries/").status_code, 400)


class ReportServiceTests(ReportsTestBase):
    def test_salary_report_by_month(self):
        rows = salary_report(date(2026, 3, 1), date(2026, 4, 30), "month")

        self.assertEqual([row["period"] for row in rows], ["2026-03", "2026-04"])
        self.assertEqual(rows[0]["total_amount"], Decimal("1000.00"))
        self.assertEqual(rows[0]["workers"][0]["worker_name"], "Ravi")

    def test_salary_report_by_day(self):
        rows = salary_report(date(2026, 3, 1), date(2026, 3, 31), "day")
        self.assertEqual([row["period"] for row in rows], ["2026-03-05"])

    def test_worker_performance_respects_range(self):
        rows = {row["worker"]["id"]: row for row in worker_performance(date(2026, 3, 1), date(2026, 3, 2))}
        self.assertEqual(rows[self.ravi.id]["attendance"]["present"], 1)
        self.assertEqual(rows[self.ravi.id]["attendance"]["halfday"], 1)
        self.assertEqual(rows[self.ravi.id]["salary"]["paid"], Decimal("0.00"))

    def test_recent_activity_descriptions_carry_plain_amounts(self):
        descriptions = [item["description"] for item in recent_activities(limit=20)]

        self.assertIn("Payment of 40000.00 received for project Villa", descriptions)
        self.assertIn("Salary of 500.00 paid to Ravi", descriptions)
        self.assertIn("Salary of 1000.00 paid to Ravi", descriptions)
