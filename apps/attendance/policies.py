from accounts.access_policy import AccessPolicy

from .models import Attendance


class AttendancePolicy:
    @staticmethod
    def visible_attendance(user):
        qs = Attendance.objects.select_related("worker", "project")
        if AccessPolicy.is_admin(user):
            return qs
        if AccessPolicy.is_worker(user) and user.worker_id:
            return qs.filter(worker_id=user.worker_id)
        if AccessPolicy.is_project_owner(user) and user.project_owner_id:
            return qs.filter(project__owner_id=user.project_owner_id)
        return qs.none()

    @staticmethod
    def is_duplicate(worker_id, date, *, exclude_id=None) -> bool:
        qs = Attendance.objects.filter(worker_id=worker_id, date=date)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()
