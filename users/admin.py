"""
Users — Django Admin Configuration

@file users/admin.py
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Staff accounts. Franchise users must be bound to exactly one franchise."""

    list_display = ('phone', 'full_name', 'role', 'franchise', 'status', 'is_active', 'last_login')
    list_filter = ('role', 'status', 'franchise')
    search_fields = ('phone', 'email', 'first_name', 'last_name', 'franchise__name')
    readonly_fields = ('id', 'date_joined', 'last_login', 'created_at', 'updated_at')
    list_select_related = ('franchise',)
    ordering = ('franchise__name', 'phone')

    fieldsets = (
        (None, {'fields': ('id', 'phone', 'password')}),
        (_('Profile'), {'fields': ('first_name', 'last_name', 'email')}),
        (_('Access'), {'fields': ('role', 'franchise', 'status', 'is_active', 'is_staff', 'is_superuser')}),
        (_('History'), {
            'fields': ('date_joined', 'last_login', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('phone', 'password1', 'password2', 'role', 'franchise'),
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).filter(is_deleted=False)

    @admin.display(description=_('Name'))
    def full_name(self, obj):
        return obj.get_full_name()
