"""Role-based DRF permissions."""

from rest_framework.permissions import BasePermission


class IsStaffRole(BasePermission):
    """Allow admins and managers."""

    message = "Staff role required."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_staff_role", False))


class IsAdminRole(BasePermission):
    """Allow admins only."""

    message = "Admin role required."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_admin_role", False))
