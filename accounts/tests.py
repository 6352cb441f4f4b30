from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from .models import AuditLog, Role, User


class RoleSeedTests(TestCase):
    def test_roles_are_seeded(self):
        levels = dict(Role.objects.values_list("name", "level"))
        self.assertEqual(
            levels,
            {
                Role.Name.ADMIN: Role.Level.ADMIN,
                Role.Name.WORKER: Role.Level.WORKER,
                Role.Name.PROJECT_OWNER: Role.Level.PROJECT_OWNER,
            },
        )


class LoginApiTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        self.user = User.objects.create_user(username="boss", password="StrongPass123!", role=self.role)

    def test_login_returns_token_pair_and_user(self):
        response = self.client.post(
            "/api/v1/auth/login/",
            {"username": "boss", "password": "StrongPass123!"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        self.assertEqual(response.data["user"]["role"], Role.Name.ADMIN)
        self.assertTrue(AuditLog.objects.filter(action="login_success", user=self.user).exists())

    def test_wrong_password(self):
        response = self.client.post(
            "/api/v1/auth/login/",
            {"username": "boss", "password": "nope"},
            format="json",
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["detail"], "Invalid credentials.")
        self.assertTrue(AuditLog.objects.filter(action="login_failed", object_id=str(self.user.id)).exists())

    def test_missing_fields(self):
        response = self.client.post("/api/v1/auth/login/", {"username": "boss"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_access_token_authenticates_me(self):
        login = self.client.post(
            "/api/v1/auth/login/",
            {"username": "boss", "password": "StrongPass123!"},
            format="json",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        response = self.client.get("/api/v1/auth/me/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["username"], "boss")
        self.assertEqual(response.data["role_level"], Role.Level.ADMIN)

    def test_refresh(self):
        login = self.client.post(
            "/api/v1/auth/login/",
            {"username": "boss", "password": "StrongPass123!"},
            format="json",
        )
        response = self.client.post("/api/v1/auth/refresh/", {"refresh": login.data["refresh"]}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data)


class RegisterApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_first_user_becomes_admin(self):
        response = self.client.post(
            "/api/v1/auth/register/",
            {"username": "founder", "password": "StrongPass123!", "role": Role.Name.WORKER},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        user = User.objects.get(username="founder")
        self.assertEqual(user.role.name, Role.Name.ADMIN)
        self.assertTrue(user.is_staff)
        self.assertIn("access", response.data)

    def test_registration_closes_after_bootstrap(self):
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        User.objects.create_user(username="boss", password="StrongPass123!", role=admin_role)

        response = self.client.post(
            "/api/v1/auth/register/",
            {"username": "intruder", "password": "StrongPass123!"},
            format="json",
        )

        self.assertEqual(response.status_code, 401)
        self.assertFalse(User.objects.filter(username="intruder").exists())

    def test_worker_cannot_register_users(self):
        worker_role, _ = Role.objects.get_or_create(name=Role.Name.WORKER, defaults={"level": Role.Level.WORKER})
        worker = User.objects.create_user(username="ravi", password="StrongPass123!", role=worker_role)
        self.client.force_authenticate(user=worker)

        response = self.client.post(
            "/api/v1/auth/register/",
            {"username": "friend", "password": "StrongPass123!"},
            format="json",
        )

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["detail"], "Admin role required.")

    def test_admin_registers_worker_login(self):
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        admin = User.objects.create_user(username="boss", password="StrongPass123!", role=admin_role)
        self.client.force_authenticate(user=admin)

        response = self.client.post(
            "/api/v1/auth/register/",
            {"username": "ravi", "password": "StrongPass123!", "role": Role.Name.WORKER},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["user"]["role"], Role.Name.WORKER)
        self.assertFalse(User.objects.get(username="ravi").is_staff)

        response = self.client.post(
            "/api/v1/auth/register/",
            {"username": "RAVI", "password": "StrongPass123!"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("username", response.data)

    def test_owner_login_needs_linked_owner(self):
        admin_role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        admin = User.objects.create_user(username="boss", password="StrongPass123!", role=admin_role)
        self.client.force_authenticate(user=admin)

        response = self.client.post(
            "/api/v1/auth/register/",
            {"username": "meera", "password": "StrongPass123!", "role": Role.Name.PROJECT_OWNER},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("project_owner", response.data)

    def test_weak_password_is_rejected(self):
        response = self.client.post(
            "/api/v1/auth/register/",
            {"username": "founder", "password": "123"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.data)


class CreateAdminCommandTests(TestCase):
    @override_settings(DEFAULT_ADMIN_USERNAME="site_admin", DEFAULT_ADMIN_PASSWORD="StrongPass123!")
    def test_creates_superuser_once(self):
        call_command("create_admin", stdout=StringIO())
        user = User.objects.get(username="site_admin")
        self.assertTrue(user.is_superuser)
        self.assertEqual(user.role.name, Role.Name.ADMIN)

        out = StringIO()
        call_command("create_admin", stdout=out)
        self.assertIn("already exists", out.getvalue())
        self.assertEqual(User.objects.filter(username="site_admin").count(), 1)

    def test_explicit_credentials(self):
        call_command("create_admin", "--username", "ops", "--password", "StrongPass123!", stdout=StringIO())
        self.assertTrue(User.objects.get(username="ops").check_password("StrongPass123!"))
