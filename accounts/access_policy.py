from __future__ import annotations

from .models import Role


class AccessPolicy:
    """Centralized role checks shared by every app."""

    @staticmethod
    def _has_role(user) -> bool:
        return bool(user and user.is_authenticated and getattr(user, "role_id", None))

    @classmethod
    def role_level(cls, user) -> int:
        if not cls._has_role(user):
            return 0
        return int(user.role.level)

    @classmethod
    def is_admin(cls, user) -> bool:
        if user and user.is_authenticated and getattr(user, "is_superuser", False):
            return True
        return cls._has_role(user) and user.role.name == Role.Name.ADMIN

    @classmethod
    def is_worker(cls, user) -> bool:
        return cls._has_role(user) and user.role.name == Role.Name.WORKER

    @classmethod
    def is_project_owner(cls, user) -> bool:
        return cls._has_role(user) and user.role.name == Role.Name.PROJECT_OWNER

    @classmethod
    def can_manage_records(cls, user) -> bool:
        """Create/update/delete of any ledger-affecting record."""
        return cls.is_admin(user)

    @classmethod
    def can_register_users(cls, user) -> bool:
        return cls.is_admin(user)

    @classmethod
    def can_view_worker(cls, user, worker) -> bool:
        if cls.is_admin(user):
            return True
        return cls.is_worker(user) and user.worker_id == worker.pk

    @classmethod
    def can_view_owner(cls, user, owner) -> bool:
        if cls.is_admin(user):
            return True
        return cls.is_project_owner(user) and user.project_owner_id == owner.pk

    @classmethod
    def can_view_project(cls, user, project) -> bool:
        if cls.is_admin(user):
            return True
        if cls.is_project_owner(user):
            return user.project_owner_id == project.owner_id
        if cls.is_worker(user) and user.worker_id:
            return project.assigned_workers.filter(pk=user.worker_id).exists()
        return False
