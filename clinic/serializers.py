"""
Clinic — Serializers

@file clinic/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from core.serializers import ReceiptReadSerializer, ReceiptWriteSerializer
from inventory.services import LedgerService

from .models import (
    Appointment,
    Consultation,
    ConsultationDetail,
    ConsultationMedicine,
    Patient,
    Service,
)


class PatientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = [
            'id', 'patient_no', 'franchise', 'name', 'gender', 'date_of_birth',
            'age', 'mobile', 'email', 'address', 'created_at',
        ]
        read_only_fields = ['id', 'patient_no', 'franchise', 'created_at']


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ['id', 'name', 'rate', 'description']
        read_only_fields = ['id']

    def validate_rate(self, value):
        if value < 0:
            raise serializers.ValidationError('Rate cannot be negative.')
        return value


class AppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source='patient.name', read_only=True)

    class Meta:
        model = Appointment
        fields = ['id', 'franchise', 'patient', 'patient_name', 'appointment_at', 'visit_purpose', 'created_at']
        read_only_fields = ['id', 'franchise', 'created_at']


class ConsultationDetailReadSerializer(serializers.ModelSerializer):
    service_name = serializers.CharField(source='service.name', read_only=True, default=None)

    class Meta:
        model = ConsultationDetail
        fields = ['id', 'service', 'service_name', 'description', 'qty', 'rate', 'amount']
        read_only_fields = fields


class ConsultationMedicineReadSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)

    class Meta:
        model = ConsultationMedicine
        fields = ['id', 'medicine', 'medicine_name', 'qty', 'mrp', 'amount', 'doses']
        read_only_fields = fields


class ConsultationReadSerializer(serializers.ModelSerializer):
    franchise = serializers.UUIDField(source='appointment.franchise_id', read_only=True)
    patient = serializers.UUIDField(source='appointment.patient_id', read_only=True)
    patient_name = serializers.CharField(source='appointment.patient.name', read_only=True)
    consultation_details = ConsultationDetailReadSerializer(source='details', many=True, read_only=True)
    consultation_medicines = ConsultationMedicineReadSerializer(source='medicines', many=True, read_only=True)
    receipts = ReceiptReadSerializer(many=True, read_only=True)
    stock_transaction = serializers.SerializerMethodField()

    class Meta:
        model = Consultation
        fields = [
            'id', 'appointment', 'franchise', 'patient', 'patient_name',
            'complaint', 'diagnosis', 'remarks', 'next_follow_up_date',
            'total_amount', 'total_received_amount',
            'consultation_details', 'consultation_medicines', 'receipts',
            'stock_transaction', 'created_at',
        ]
        read_only_fields = fields

    def get_stock_transaction(self, obj):
        txn = LedgerService.transaction_for(obj, lock=False)
        if txn is None:
            return None
        return {'id': str(txn.pk), 'txn_no': txn.txn_no}


class ConsultationDetailLineSerializer(serializers.Serializer):
    service = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    qty = serializers.IntegerField(min_value=1, default=1)
    rate = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)


class ConsultationMedicineLineSerializer(serializers.Serializer):
    medicine = serializers.UUIDField()
    qty = serializers.IntegerField(min_value=1)
    mrp = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False)
    doses = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ConsultationCreateSerializer(serializers.Serializer):
    appointment = serializers.UUIDField()
    complaint = serializers.CharField(required=False, allow_blank=True)
    diagnosis = serializers.CharField(required=False, allow_blank=True)
    remarks = serializers.CharField(required=False, allow_blank=True)
    next_follow_up_date = serializers.DateField(required=False, allow_null=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    consultation_details = ConsultationDetailLineSerializer(many=True, required=False, default=list)
    consultation_medicines = ConsultationMedicineLineSerializer(many=True, required=False, default=list)
    receipt = ReceiptWriteSerializer(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get('consultation_details') and not attrs.get('consultation_medicines'):
            raise serializers.ValidationError('A consultation needs at least one service or medicine line.')
        return attrs
