"""
Sales — Serializers

@file sales/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from inventory.services import LedgerService

from .models import Sale, SaleDetail, Transport, TransportDetail


class SaleDetailReadSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = SaleDetail
        fields = ['id', 'medicine', 'medicine_name', 'batch_number', 'expiry_date', 'quantity', 'rate', 'amount']
        read_only_fields = fields


class TransportDetailReadSerializer(serializers.ModelSerializer):
    medicine = serializers.UUIDField(source='sale_detail.medicine_id', read_only=True)
    batch_number = serializers.CharField(source='sale_detail.batch_number', read_only=True)

    class Meta:
        model = TransportDetail
        fields = ['id', 'sale_detail', 'medicine', 'batch_number', 'quantity']
        read_only_fields = fields


class TransportReadSerializer(serializers.ModelSerializer):
    invoice_no = serializers.CharField(source='sale.invoice_no', read_only=True)
    franchise_name = serializers.CharField(source='franchise.name', read_only=True)
    transport_details = TransportDetailReadSerializer(source='details', many=True, read_only=True)

    class Meta:
        model = Transport
        fields = [
            'id', 'sale', 'invoice_no', 'franchise', 'franchise_name', 'status',
            'dispatched_quantity', 'transporter_name', 'company_name', 'transport_fee',
            'receipt_number', 'vehicle_number', 'tracking_number', 'notes',
            'dispatched_at', 'delivered_at', 'stock_posted_at',
            'transport_details', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class SaleReadSerializer(serializers.ModelSerializer):
    franchise_name = serializers.CharField(source='franchise.name', read_only=True)
    sale_details = SaleDetailReadSerializer(source='details', many=True, read_only=True)
    transports = TransportReadSerializer(many=True, read_only=True)
    stock_transaction = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            'id', 'invoice_no', 'invoice_date', 'franchise', 'franchise_name',
            'discount_percent', 'total_amount', 'notes',
            'sale_details', 'transports', 'stock_transaction',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_stock_transaction(self, obj):
        txn = LedgerService.transaction_for(obj, lock=False)
        if txn is None:
            return None
        return {'id': str(txn.pk), 'txn_no': txn.txn_no}


class SaleLineSerializer(serializers.Serializer):
    medicine = serializers.UUIDField()
    batch_number = serializers.CharField(max_length=100)
    expiry_date = serializers.DateField()
    quantity = serializers.IntegerField(min_value=1)
    rate = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)


class SaleWriteSerializer(serializers.Serializer):
    franchise = serializers.UUIDField()
    invoice_date = serializers.DateTimeField(required=False)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'),
        required=False,
    )
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    sale_details = SaleLineSerializer(many=True, allow_empty=False)


class DispatchedDetailSerializer(serializers.Serializer):
    sale_detail = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=0)


class TransportWriteSerializer(serializers.Serializer):
    sale = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=Transport.Status.choices, required=False)
    dispatched_details = DispatchedDetailSerializer(many=True, required=False, allow_empty=False)
    dispatched_quantity = serializers.IntegerField(min_value=1, required=False)
    transporter_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    company_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    transport_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True,
    )
    receipt_number = serializers.CharField(required=False, allow_blank=True, max_length=100)
    vehicle_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    tracking_number = serializers.CharField(required=False, allow_blank=True, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True)


class TransportCreateSerializer(TransportWriteSerializer):
    sale = serializers.UUIDField()

    def validate(self, attrs):
        if not attrs.get('dispatched_details') and attrs.get('dispatched_quantity') is None:
            raise serializers.ValidationError({'dispatched_details': ['Dispatched details are required.']})
        return attrs
