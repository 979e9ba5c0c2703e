"""
Core — Shared Serializers

@file core/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from core.models import ReceiptBase

RECEIPT_FIELDS = [
    'date', 'payment_mode', 'amount', 'payer_name', 'contact_number',
    'upi_name', 'utr_number', 'bank_name', 'cheque_number', 'cheque_date', 'notes',
]


class ReceiptWriteSerializer(serializers.Serializer):
    """Payment details accepted inline with a bill or consultation."""

    date = serializers.DateTimeField(required=False)
    payment_mode = serializers.ChoiceField(choices=ReceiptBase.PaymentMode.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    payer_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    contact_number = serializers.CharField(required=False, allow_blank=True, max_length=20)
    upi_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    utr_number = serializers.CharField(required=False, allow_blank=True, max_length=100)
    bank_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    cheque_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    cheque_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        mode = attrs.get('payment_mode')
        if mode == ReceiptBase.PaymentMode.CHEQUE and not attrs.get('cheque_number'):
            raise serializers.ValidationError({'cheque_number': 'Cheque number is required for cheque payments.'})
        if mode == ReceiptBase.PaymentMode.UPI and not attrs.get('utr_number'):
            raise serializers.ValidationError({'utr_number': 'UTR number is required for UPI payments.'})
        return attrs


class ReceiptReadSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    receipt_number = serializers.CharField(read_only=True)
    date = serializers.DateTimeField(read_only=True)
    payment_mode = serializers.CharField(read_only=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    payer_name = serializers.CharField(read_only=True)
    notes = serializers.CharField(read_only=True)
