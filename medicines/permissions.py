"""
Medicines — Permissions

Catalogue writes are restricted to head-office admins.

@file medicines/permissions.py
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission


class CanModifyCatalog(BasePermission):
    """Read is open to authenticated users; write requires the ADMIN role."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return user.is_admin_role
