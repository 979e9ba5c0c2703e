"""
Billing — Serializers

@file billing/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from core.serializers import ReceiptReadSerializer, ReceiptWriteSerializer
from inventory.services import LedgerService

from .models import MedicineBill, MedicineBillDetail


class MedicineBillDetailReadSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = MedicineBillDetail
        fields = ['id', 'medicine', 'medicine_name', 'qty', 'mrp', 'amount']
        read_only_fields = fields


class MedicineBillReadSerializer(serializers.ModelSerializer):
    franchise_name = serializers.CharField(source='franchise.name', read_only=True)
    patient_name = serializers.CharField(source='patient.name', read_only=True, default=None)
    medicine_bill_details = MedicineBillDetailReadSerializer(source='details', many=True, read_only=True)
    receipts = ReceiptReadSerializer(many=True, read_only=True)
    stock_transaction = serializers.SerializerMethodField()

    class Meta:
        model = MedicineBill
        fields = [
            'id', 'bill_number', 'bill_date',
            'franchise', 'franchise_name', 'patient', 'patient_name',
            'discount_percent', 'total_amount', 'total_received_amount',
            'medicine_bill_details', 'receipts', 'stock_transaction',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_stock_transaction(self, obj):
        txn = LedgerService.transaction_for(obj, lock=False)
        if txn is None:
            return None
        return {'id': str(txn.pk), 'txn_no': txn.txn_no}


class MedicineBillLineSerializer(serializers.Serializer):
    medicine = serializers.UUIDField()
    qty = serializers.IntegerField(min_value=1)
    mrp = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)


class MedicineBillCreateSerializer(serializers.Serializer):
    franchise = serializers.UUIDField(required=False, allow_null=True)
    patient = serializers.UUIDField(required=False, allow_null=True)
    bill_date = serializers.DateTimeField(required=False)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'),
        required=False, default=Decimal('0'),
    )
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    medicine_bill_details = MedicineBillLineSerializer(many=True, allow_empty=False)
    receipt = ReceiptWriteSerializer(required=False, allow_null=True)
