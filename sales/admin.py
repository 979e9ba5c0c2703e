"""
Sales — Django Admin Configuration

Sales and transports change stock, so they are edited through the API
only.

@file sales/admin.py
"""

from django.contrib import admin

from .models import Sale, SaleDetail, Transport, TransportDetail


class SaleDetailInline(admin.TabularInline):
    model = SaleDetail
    extra = 0
    readonly_fields = ('medicine', 'batch_number', 'expiry_date', 'quantity', 'rate', 'amount')
    can_delete = False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ('invoice_no', 'invoice_date', 'franchise', 'total_amount')
    list_filter = ('franchise',)
    search_fields = ('invoice_no',)
    list_select_related = ('franchise',)
    date_hierarchy = 'invoice_date'
    readonly_fields = ('id', 'invoice_no', 'invoice_date', 'franchise', 'discount_percent', 'total_amount', 'notes')
    inlines = [SaleDetailInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class TransportDetailInline(admin.TabularInline):
    model = TransportDetail
    extra = 0
    readonly_fields = ('sale_detail', 'quantity')
    can_delete = False


@admin.register(Transport)
class TransportAdmin(admin.ModelAdmin):
    list_display = ('sale', 'franchise', 'status', 'dispatched_quantity', 'dispatched_at', 'delivered_at', 'stock_posted_at')
    list_filter = ('status', 'franchise')
    search_fields = ('sale__invoice_no', 'tracking_number', 'transporter_name')
    list_select_related = ('sale', 'franchise')
    readonly_fields = ('status', 'dispatched_quantity', 'dispatched_at', 'delivered_at', 'stock_posted_at')
    inlines = [TransportDetailInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
