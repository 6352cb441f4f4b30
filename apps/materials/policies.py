from accounts.access_policy import AccessPolicy

from .models import Material


class MaterialPolicy:
    @staticmethod
    def visible_materials(user):
        qs = Material.objects.select_related("project")
        if AccessPolicy.is_admin(user):
            return qs
        if AccessPolicy.is_project_owner(user) and user.project_owner_id:
            return qs.filter(project__owner_id=user.project_owner_id)
        return qs.none()
