"""
Core — Django Admin Configuration

Read-only viewer for the audit trail. Stock postings and reversals carry
the transaction number in ``new_values``.

@file core/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from core.models import AuditLog

ACTION_COLORS = {
    AuditLog.ActionChoices.CREATE: '#22c55e',
    AuditLog.ActionChoices.UPDATE: '#3b82f6',
    AuditLog.ActionChoices.DELETE: '#ef4444',
    AuditLog.ActionChoices.STATUS_CHANGE: '#eab308',
    AuditLog.ActionChoices.STOCK_POSTING: '#06b6d4',
    AuditLog.ActionChoices.STOCK_REVERSAL: '#f97316',
}


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action_badge', 'model_name', 'object_id', 'txn_no', 'actor')
    list_filter = ('action', 'model_name')
    search_fields = ('object_id', 'model_name', 'actor__phone')
    readonly_fields = [f.name for f in AuditLog._meta.fields]
    date_hierarchy = 'timestamp'
    list_select_related = ('actor',)
    list_per_page = 50

    fieldsets = (
        (None, {'fields': ('id', 'action', 'timestamp', 'actor', 'model_name', 'object_id')}),
        (_('Values'), {'fields': ('old_values', 'new_values'), 'classes': ('collapse',)}),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Transaction'))
    def txn_no(self, obj):
        return (obj.new_values or {}).get('txn_no', '')

    @admin.display(description=_('Action'))
    def action_badge(self, obj):
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; border-radius:4px;">{}</span>',
            ACTION_COLORS.get(obj.action, '#6b7280'), obj.get_action_display(),
        )
