from accounts.access_policy import AccessPolicy

from .models import Project, ProjectOwner


class ProjectPolicy:
    @staticmethod
    def visible_owners(user):
        qs = ProjectOwner.objects.all()
        if AccessPolicy.is_admin(user):
            return qs
        if AccessPolicy.is_project_owner(user) and user.project_owner_id:
            return qs.filter(id=user.project_owner_id)
        return qs.none()

    @staticmethod
    def visible_projects(user):
        qs = Project.objects.select_related("owner")
        if AccessPolicy.is_admin(user):
            return qs
        if AccessPolicy.is_project_owner(user) and user.project_owner_id:
            return qs.filter(owner_id=user.project_owner_id)
        if AccessPolicy.is_worker(user) and user.worker_id:
            return qs.filter(assigned_workers=user.worker_id)
        return qs.none()

    @staticmethod
    def owner_delete_blocker(owner) -> str | None:
        if owner.projects.exists():
            return "Project owner has projects and cannot be removed."
        if owner.payments.exists():
            return "Project owner has payments and cannot be removed."
        return None

    @staticmethod
    def project_delete_blocker(project) -> str | None:
        for relation, label in (
            ("materials", "materials"),
            ("payments", "payments"),
            ("salaries", "salaries"),
            ("attendance", "attendance records"),
        ):
            if getattr(project, relation).exists():
                return f"Project has {label} and cannot be removed."
        return None
