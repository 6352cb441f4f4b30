from rest_framework.permissions import SAFE_METHODS, BasePermission

from .access_policy import AccessPolicy


class IsAdminRole(BasePermission):
    message = "Admin role required."

    def has_permission(self, request, view):
        return AccessPolicy.is_admin(request.user)


class IsAdminOrReadOnly(BasePermission):
    """
    Any authenticated user may read (views scope what they see),
    only admins may create, update or delete.
    """

    message = "Admin role required."

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return AccessPolicy.can_manage_records(request.user)
