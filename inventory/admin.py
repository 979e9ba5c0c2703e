"""
Inventory — Django Admin Configuration

Balances and the ledger are read-only here: every change must go through
a posting so the ledger keeps explaining the balances.

@file inventory/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import (
    AdminStockBalance,
    AdminStockBatchBalance,
    StockBalance,
    StockBatchBalance,
    StockLedger,
    StockRecall,
    StockTransaction,
)


class ReadOnlyAdmin(admin.ModelAdmin):
    show_full_result_count = False
    list_per_page = 50

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class StockLedgerInline(admin.TabularInline):
    model = StockLedger
    extra = 0
    fields = ('medicine', 'batch_number', 'expiry_date', 'qty_change', 'rate', 'amount')
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StockTransaction)
class StockTransactionAdmin(ReadOnlyAdmin):
    list_display = ('txn_no', 'txn_type', 'franchise', 'txn_date', 'reference_type', 'created_by')
    list_filter = ('txn_type', 'franchise')
    search_fields = ('txn_no', 'reference_type')
    list_select_related = ('franchise', 'created_by')
    date_hierarchy = 'txn_date'
    ordering = ('-txn_date',)
    inlines = [StockLedgerInline]

    fieldsets = (
        (_('Transaction'), {
            'fields': ('id', 'txn_no', 'txn_type', 'txn_date', 'franchise', 'notes'),
        }),
        (_('Reference'), {
            'fields': ('reference_type', 'reference_id'),
        }),
        (_('Audit'), {
            'fields': ('created_by', 'created_at'),
        }),
    )
    readonly_fields = (
        'id', 'txn_no', 'txn_type', 'txn_date', 'franchise', 'notes',
        'reference_type', 'reference_id', 'created_by', 'created_at',
    )


@admin.register(StockLedger)
class StockLedgerAdmin(ReadOnlyAdmin):
    list_display = (
        'transaction', 'franchise', 'medicine', 'batch_number',
        'expiry_date', 'qty_change', 'rate', 'amount', 'created_at',
    )
    list_filter = ('franchise', 'created_at')
    search_fields = ('batch_number', 'medicine__name', 'transaction__txn_no')
    list_select_related = ('transaction', 'franchise', 'medicine')
    date_hierarchy = 'created_at'
    ordering = ('-created_at',)


@admin.register(StockBatchBalance)
class StockBatchBalanceAdmin(ReadOnlyAdmin):
    list_display = ('franchise', 'medicine', 'batch_number', 'expiry_date', 'quantity', 'updated_at')
    list_filter = ('franchise',)
    search_fields = ('batch_number', 'medicine__name')
    list_select_related = ('franchise', 'medicine')
    ordering = ('expiry_date',)


@admin.register(StockBalance)
class StockBalanceAdmin(ReadOnlyAdmin):
    list_display = ('franchise', 'medicine', 'quantity', 'updated_at')
    list_filter = ('franchise',)
    search_fields = ('medicine__name',)
    list_select_related = ('franchise', 'medicine')


@admin.register(AdminStockBalance)
class AdminStockBalanceAdmin(ReadOnlyAdmin):
    list_display = ('medicine', 'quantity', 'updated_at')
    search_fields = ('medicine__name',)
    list_select_related = ('medicine',)


@admin.register(AdminStockBatchBalance)
class AdminStockBatchBalanceAdmin(ReadOnlyAdmin):
    list_display = ('medicine', 'batch_number', 'expiry_date', 'quantity')
    search_fields = ('batch_number', 'medicine__name')
    list_select_related = ('medicine',)
    ordering = ('expiry_date',)


@admin.register(StockRecall)
class StockRecallAdmin(ReadOnlyAdmin):
    list_display = ('stock_transaction', 'franchise', 'medicine', 'batch_number', 'expiry_date', 'quantity', 'recalled_at')
    list_filter = ('franchise',)
    search_fields = ('batch_number', 'medicine__name')
    list_select_related = ('stock_transaction', 'franchise', 'medicine')
    date_hierarchy = 'recalled_at'
