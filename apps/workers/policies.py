from accounts.access_policy import AccessPolicy

from .models import Worker


class WorkerPolicy:
    @staticmethod
    def visible_workers(user):
        """Admins see everyone, a worker sees themself, an owner sees workers on their projects."""
        qs = Worker.objects.all()
        if AccessPolicy.is_admin(user):
            return qs
        if AccessPolicy.is_worker(user) and user.worker_id:
            return qs.filter(id=user.worker_id)
        if AccessPolicy.is_project_owner(user) and user.project_owner_id:
            return qs.filter(projects__owner_id=user.project_owner_id).distinct()
        return qs.none()

    @staticmethod
    def delete_blocker(worker) -> str | None:
        if worker.attendance.exists():
            return "Worker has attendance records and cannot be removed."
        if worker.salaries.exists():
            return "Worker has salary records and cannot be removed."
        return None
