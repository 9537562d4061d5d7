# foodlink/permissions.py
from rest_framework.permissions import BasePermission


def role_required(*roles):
    """Build a permission class that admits only users with one of ``roles``."""

    class HasRole(BasePermission):
        message = 'Your role is not authorized to access this route'

        def has_permission(self, request, view):
            user = request.user
            if not (user and user.is_authenticated):
                return False
            if user.role not in roles:
                self.message = f"Role {user.role} is not authorized to access this route"
                return False
            return True

    HasRole.__name__ = f"HasRole_{'_'.join(roles)}"
    return HasRole


IsAdmin = role_required('admin')
