from accounts.access_policy import AccessPolicy

from .models import Payment


class PaymentPolicy:
    @staticmethod
    def visible_payments(user):
        qs = Payment.objects.select_related("project", "project_owner")
        if AccessPolicy.is_admin(user):
            return qs
        if AccessPolicy.is_project_owner(user) and user.project_owner_id:
            return qs.filter(project_owner_id=user.project_owner_id)
        return qs.none()
