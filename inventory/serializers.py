"""
Inventory — Serializers

@file inventory/serializers.py
"""

from rest_framework import serializers

from medicines.models import Medicine

from .models import (
    AdminStockBalance,
    AdminStockBatchBalance,
    StockBalance,
    StockBatchBalance,
    StockLedger,
    StockRecall,
)


class StockBalanceSerializer(serializers.ModelSerializer):
    franchise_name = serializers.CharField(source='franchise.name', read_only=True)
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = StockBalance
        fields = ['id', 'franchise', 'franchise_name', 'medicine', 'medicine_name', 'quantity', 'updated_at']
        read_only_fields = fields


class StockBatchBalanceSerializer(serializers.ModelSerializer):
    franchise_name = serializers.CharField(source='franchise.name', read_only=True)
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    days_to_expiry = serializers.IntegerField(read_only=True)

    class Meta:
        model = StockBatchBalance
        fields = [
            'id', 'franchise', 'franchise_name', 'medicine', 'medicine_name',
            'batch_number', 'expiry_date', 'days_to_expiry', 'quantity', 'updated_at',
        ]
        read_only_fields = fields


class StockLedgerSerializer(serializers.ModelSerializer):
    txn_no = serializers.CharField(source='transaction.txn_no', read_only=True)
    txn_type = serializers.CharField(source='transaction.txn_type', read_only=True)
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = StockLedger
        fields = [
            'id', 'transaction', 'txn_no', 'txn_type', 'franchise',
            'medicine', 'medicine_name', 'batch_number', 'expiry_date',
            'qty_change', 'rate', 'amount', 'created_at',
        ]
        read_only_fields = fields


class StockRecallSerializer(serializers.ModelSerializer):
    franchise_name = serializers.CharField(source='franchise.name', read_only=True)
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    txn_no = serializers.CharField(source='stock_transaction.txn_no', read_only=True)

    class Meta:
        model = StockRecall
        fields = [
            'id', 'txn_no', 'franchise', 'franchise_name', 'medicine', 'medicine_name',
            'batch_number', 'expiry_date', 'quantity', 'created_by', 'recalled_at',
        ]
        read_only_fields = fields


class RecallRequestSerializer(serializers.Serializer):
    franchise = serializers.UUIDField()
    medicine = serializers.UUIDField()
    batch_number = serializers.CharField(max_length=100)
    expiry_date = serializers.DateField()
    quantity = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


# ---------------------------------------------------------------------------
# Admin pool
# ---------------------------------------------------------------------------

class AdminStockBalanceSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = AdminStockBalance
        fields = ['id', 'medicine', 'medicine_name', 'quantity', 'updated_at']
        read_only_fields = fields


class AdminStockBatchBalanceSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = AdminStockBatchBalance
        fields = ['id', 'medicine', 'medicine_name', 'batch_number', 'expiry_date', 'quantity']
        read_only_fields = fields


class RefillItemSerializer(serializers.Serializer):
    medicine = serializers.PrimaryKeyRelatedField(queryset=Medicine.objects.filter(is_deleted=False))
    quantity = serializers.IntegerField(min_value=1)
    batch_number = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    expiry_date = serializers.DateField(required=False, allow_null=True, default=None)


class RefillSerializer(serializers.Serializer):
    items = RefillItemSerializer(many=True, allow_empty=False)
