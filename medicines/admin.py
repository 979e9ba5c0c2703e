"""
Medicines — Django Admin Configuration

@file medicines/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import Brand, Medicine


class MedicineInline(admin.TabularInline):
    model = Medicine
    fk_name = 'brand'
    extra = 0
    fields = ('name', 'rate', 'mrp', 'is_active')
    show_change_link = True


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ('name', 'medicines_count', 'created_at')
    search_fields = ('name',)
    readonly_fields = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by')
    inlines = [MedicineInline]

    @admin.display(description=_('Medicines'))
    def medicines_count(self, obj):
        return obj.medicines.filter(is_deleted=False).count()


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ('name', 'brand', 'formatted_rate', 'formatted_mrp', 'active_badge', 'created_at')
    list_filter = ('is_active', 'brand', 'is_deleted')
    search_fields = ('name', 'brand__name')
    readonly_fields = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by')
    list_select_related = ('brand',)
    list_per_page = 30
    ordering = ('name',)

    fieldsets = (
        (_('Identification'), {
            'fields': ('id', 'name', 'brand', 'is_active'),
        }),
        (_('Pricing'), {
            'fields': ('rate', 'mrp'),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(description=_('Rate'), ordering='rate')
    def formatted_rate(self, obj):
        return f'{obj.rate:,.2f}'

    @admin.display(description=_('MRP'), ordering='mrp')
    def formatted_mrp(self, obj):
        return f'{obj.mrp:,.2f}'

    @admin.display(description=_('Active'))
    def active_badge(self, obj):
        color = '#22c55e' if obj.is_active else '#6b7280'
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:4px; font-size:11px; font-weight:600;">{}</span>',
            color, _('Active') if obj.is_active else _('Inactive'),
        )
