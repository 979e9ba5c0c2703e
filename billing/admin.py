"""
Billing — Django Admin Configuration

Bills are created and deleted only through the API so the stock ledger
stays in step; the admin is for lookup.

@file billing/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import MedicineBill, MedicineBillDetail, MedicineBillReceipt


class MedicineBillDetailInline(admin.TabularInline):
    model = MedicineBillDetail
    extra = 0
    fields = ('medicine', 'qty', 'mrp', 'amount')
    readonly_fields = fields
    can_delete = False


class MedicineBillReceiptInline(admin.TabularInline):
    model = MedicineBillReceipt
    extra = 0
    fields = ('receipt_number', 'date', 'payment_mode', 'amount')
    readonly_fields = fields
    can_delete = False


@admin.register(MedicineBill)
class MedicineBillAdmin(admin.ModelAdmin):
    list_display = ('bill_number', 'bill_date', 'franchise', 'patient', 'total_amount', 'total_received_amount')
    list_filter = ('franchise',)
    search_fields = ('bill_number', 'patient__name')
    list_select_related = ('franchise', 'patient')
    date_hierarchy = 'bill_date'
    readonly_fields = (
        'id', 'bill_number', 'bill_date', 'franchise', 'patient',
        'discount_percent', 'total_amount', 'total_received_amount',
        'created_at', 'created_by',
    )
    inlines = [MedicineBillDetailInline, MedicineBillReceiptInline]

    fieldsets = (
        (_('Bill'), {
            'fields': ('id', 'bill_number', 'bill_date', 'franchise', 'patient'),
        }),
        (_('Amounts'), {
            'fields': ('discount_percent', 'total_amount', 'total_received_amount'),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'created_by'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
