from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

from .managers import UserManager


# ================= RBAC =================
class Role(models.Model):
    class Name(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        WORKER = "WORKER", "Worker"
        PROJECT_OWNER = "PROJECT_OWNER", "Project owner"

    class Level(models.IntegerChoices):
        PROJECT_OWNER = 10, "Project owner"
        WORKER = 20, "Worker"
        ADMIN = 30, "Admin"

    name = models.CharField(max_length=50, unique=True, choices=Name.choices)
    level = models.PositiveSmallIntegerField(choices=Level.choices, default=Level.WORKER)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["-level", "name"]

    def __str__(self):
        return self.name


# ================= User =================
class User(AbstractUser):
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name="users")
    phone = models.CharField(max_length=50, blank=True)

    # A worker login sees its own attendance and salaries,
    # a project owner login sees its own projects and payments.
    worker = models.OneToOneField(
        "workers.Worker",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="user_account",
    )
    project_owner = models.ForeignKey(
        "projects.ProjectOwner",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="user_accounts",
    )

    objects = UserManager()

    @property
    def role_name(self) -> str:
        if not self.role_id:
            return ""
        return self.role.name

    @property
    def is_admin_role(self) -> bool:
        return self.role_name == Role.Name.ADMIN


# ================= Audit =================
class AuditLog(models.Model):
    """
    Audit storage backend.
    Use apps.audit.log_event as the entrypoint for new writes.
    """

    class Level(models.TextChoices):
        INFO = "info", "Info"
        WARNING = "warning", "Warning"
        ERROR = "error", "Error"

    class Category(models.TextChoices):
        AUTH = "auth", "Authentication"
        USER = "user", "User management"
        LEDGER = "ledger", "Ledger"
        SYSTEM = "system", "System"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    action = models.CharField(max_length=255)
    object_type = models.CharField(max_length=100, blank=True)
    object_id = models.CharField(max_length=100, blank=True)
    level = models.CharField(max_length=20, choices=Level.choices, default=Level.INFO)
    category = models.CharField(max_length=50, choices=Category.choices, default=Category.SYSTEM)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["action"], name="audit_action_idx"),
            models.Index(fields=["category"], name="audit_category_idx"),
            models.Index(fields=["created_at"], name="audit_created_at_idx"),
        ]

    @classmethod
    def log(
        cls,
        action,
        user=None,
        object_type="",
        object_id="",
        level=Level.INFO,
        category=Category.SYSTEM,
        ip_address=None,
        metadata=None,
    ):
        return cls.objects.create(
            user=user,
            action=action,
            object_type=object_type,
            object_id=object_id,
            level=level,
            category=category,
            ip_address=ip_address,
            metadata=metadata or {},
        )

    def __str__(self):
        return f"[{self.level.upper()}] {self.action}"
