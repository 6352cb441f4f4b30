from accounts.access_policy import AccessPolicy

from .models import Salary


class SalaryPolicy:
    @staticmethod
    def visible_salaries(user):
        qs = Salary.objects.select_related("worker", "project")
        if AccessPolicy.is_admin(user):
            return qs
        if AccessPolicy.is_worker(user) and user.worker_id:
            return qs.filter(worker_id=user.worker_id)
        return qs.none()
