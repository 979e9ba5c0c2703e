"""
Clinic — Views

Patients, services, appointments and consultations. Consultation create
dispenses stock; everything else is plain CRUD.

@file clinic/views.py
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.serializers import ReceiptReadSerializer, ReceiptWriteSerializer
from medicines.permissions import CanModifyCatalog
from users.permissions import IsAdminOrFranchiseStaff
from users.services import FranchiseResolver

from .models import Appointment, Consultation, Patient, Service
from .serializers import (
    AppointmentSerializer,
    ConsultationCreateSerializer,
    ConsultationReadSerializer,
    PatientSerializer,
    ServiceSerializer,
)
from .services import ConsultationService


class FranchiseOwnedViewSet(viewsets.ModelViewSet):
    """Rows carrying a ``franchise`` FK, scoped to the caller's franchise."""

    permission_classes = [IsAuthenticated, IsAdminOrFranchiseStaff]
    franchise_lookup = 'franchise_id'

    def scope(self, qs):
        user = self.request.user
        if not user.is_admin_role:
            return qs.filter(**{self.franchise_lookup: user.franchise_id})
        franchise = self.request.query_params.get('franchise')
        if franchise:
            qs = qs.filter(**{self.franchise_lookup: franchise})
        return qs

    def perform_create(self, serializer):
        franchise_id = FranchiseResolver.resolve_franchise_id(
            self.request.user, self.request.data.get('franchise'),
        )
        serializer.save(franchise_id=franchise_id, created_by=self.request.user)


class PatientViewSet(FranchiseOwnedViewSet):
    serializer_class = PatientSerializer
    search_fields = ['name', 'mobile', 'patient_no']
    ordering = ['name']

    def get_queryset(self):
        return self.scope(Patient.objects.filter(is_deleted=False))

    def perform_update(self, serializer):
        serializer.save(updated_by=self.request.user)

    def perform_destroy(self, instance):
        instance.soft_delete(user=self.request.user)


class AppointmentViewSet(FranchiseOwnedViewSet):
    serializer_class = AppointmentSerializer
    filterset_fields = ['patient']
    ordering = ['-appointment_at']

    def get_queryset(self):
        return self.scope(Appointment.objects.select_related('patient'))

    def perform_create(self, serializer):
        franchise_id = FranchiseResolver.resolve_franchise_id(
            self.request.user, self.request.data.get('franchise'),
        )
        patient = serializer.validated_data['patient']
        if str(patient.franchise_id) != str(franchise_id):
            raise ValidationError({'patient': ['Patient belongs to another franchise.']})
        serializer.save(franchise_id=franchise_id, created_by=self.request.user)


class ServiceViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, CanModifyCatalog]
    serializer_class = ServiceSerializer
    search_fields = ['name']
    ordering = ['name']

    def get_queryset(self):
        return Service.objects.filter(is_deleted=False)

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def perform_destroy(self, instance):
        instance.soft_delete(user=self.request.user)


class ConsultationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    POST /consultations/                 services + dispensed medicines
    POST /consultations/{id}/receipts/   record a payment
    """

    permission_classes = [IsAuthenticated, IsAdminOrFranchiseStaff]
    serializer_class = ConsultationReadSerializer
    filterset_fields = ['appointment']
    ordering = ['-created_at']

    def get_queryset(self):
        qs = (
            Consultation.objects
            .select_related('appointment__patient')
            .prefetch_related('details__service', 'medicines__medicine', 'receipts')
        )
        user = self.request.user
        if not user.is_admin_role:
            return qs.filter(appointment__franchise_id=user.franchise_id)
        franchise = self.request.query_params.get('franchise')
        if franchise:
            qs = qs.filter(appointment__franchise_id=franchise)
        return qs

    def create(self, request, *args, **kwargs):
        ser = ConsultationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        consultation = ConsultationService.create_consultation(
            appointment_id=data.pop('appointment'),
            consultation_details=data.pop('consultation_details'),
            consultation_medicines=data.pop('consultation_medicines'),
            total_amount=data.pop('total_amount', None),
            receipt=data.pop('receipt', None),
            actor=request.user,
            **data,
        )
        return Response(
            {'success': True, 'data': ConsultationReadSerializer(consultation).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'], url_path='receipts')
    def receipts(self, request, pk=None):
        consultation = self.get_object()
        ser = ReceiptWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        receipt = ConsultationService.add_receipt(
            consultation_id=consultation.pk, receipt=ser.validated_data, actor=request.user,
        )
        return Response(
            {'success': True, 'data': ReceiptReadSerializer(receipt).data},
            status=status.HTTP_201_CREATED,
        )
