"""
Medicines — Views

DRF ViewSets for brands and the medicine catalogue.

@file medicines/views.py
"""

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Brand, Medicine
from .permissions import CanModifyCatalog
from .serializers import BrandSerializer, MedicineReadSerializer, MedicineWriteSerializer
from .services import MedicineService


class BrandViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, CanModifyCatalog]
    serializer_class = BrandSerializer
    search_fields = ['name']
    ordering = ['name']

    def get_queryset(self):
        return Brand.objects.filter(is_deleted=False)

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def perform_update(self, serializer):
        serializer.save(updated_by=self.request.user)

    def perform_destroy(self, instance):
        instance.soft_delete(user=self.request.user)


class MedicineViewSet(viewsets.ModelViewSet):
    """
    Medicine catalogue.

    List/retrieve open to any authenticated user; writes restricted to
    head-office admins. Deletion is a soft delete since ledger rows
    reference medicines.
    """

    permission_classes = [IsAuthenticated, CanModifyCatalog]
    filterset_fields = ['brand', 'is_active']
    search_fields = ['name', 'brand__name']
    ordering_fields = ['name', 'rate', 'mrp', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Medicine.objects.filter(is_deleted=False).select_related('brand')

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve'):
            return MedicineReadSerializer
        return MedicineWriteSerializer

    def perform_create(self, serializer):
        medicine = MedicineService.create_medicine(
            actor=self.request.user, **serializer.validated_data,
        )
        serializer.instance = medicine

    def perform_update(self, serializer):
        medicine = MedicineService.update_medicine(
            medicine_id=self.get_object().pk,
            actor=self.request.user,
            **serializer.validated_data,
        )
        serializer.instance = medicine

    def perform_destroy(self, instance):
        instance.soft_delete(user=self.request.user)

    @action(detail=True, methods=['post'], url_path='deactivate')
    def deactivate(self, request, pk=None):
        self.get_object()
        medicine = MedicineService.deactivate_medicine(
            medicine_id=pk, actor=request.user,
        )
        return Response({
            'success': True,
            'data': MedicineReadSerializer(medicine).data,
        })
