"""
Franchises — Django Admin Configuration

@file franchises/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from users.models import User

from .models import Franchise


class StaffInline(admin.TabularInline):
    model = User
    fk_name = 'franchise'
    extra = 0
    fields = ('phone', 'first_name', 'last_name', 'role', 'status')
    readonly_fields = fields
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Franchise)
class FranchiseAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'contact_person', 'phone', 'active_badge', 'created_at')
    list_filter = ('is_active', 'is_deleted')
    search_fields = ('name', 'code', 'contact_person', 'phone')
    readonly_fields = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by')
    list_per_page = 30
    ordering = ('name',)
    inlines = [StaffInline]

    fieldsets = (
        (None, {
            'fields': ('id', 'name', 'code', 'is_active'),
        }),
        (_('Contact'), {
            'fields': ('contact_person', 'phone', 'email', 'address'),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(description=_('Active'))
    def active_badge(self, obj):
        color = '#22c55e' if obj.is_active else '#6b7280'
        label = _('Active') if obj.is_active else _('Inactive')
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:4px; font-size:11px; font-weight:600;">{}</span>',
            color, label,
        )
