"""
Users — DRF Permission Classes

Role checks shared by every app's ViewSets.

@file users/permissions.py
"""

from rest_framework.permissions import BasePermission

from core.constants import ROLE_ADMIN, ROLE_FRANCHISE


class IsActiveUser(BasePermission):
    """Requires user to be authenticated and have ACTIVE status."""

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and getattr(request.user, 'status', None) == 'ACTIVE'
        )


class IsAdminRole(BasePermission):
    """Head-office only: superuser or ADMIN role."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_superuser or user.has_role(ROLE_ADMIN)


class IsAdminOrFranchiseStaff(BasePermission):
    """ADMIN, or FRANCHISE staff attached to a franchise."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser or user.has_role(ROLE_ADMIN):
            return True
        return user.has_role(ROLE_FRANCHISE) and user.franchise_id is not None
