"""
Billing — Views

@file billing/views.py
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.serializers import ReceiptReadSerializer, ReceiptWriteSerializer
from users.permissions import IsAdminOrFranchiseStaff
from users.services import FranchiseResolver

from .models import MedicineBill
from .serializers import MedicineBillCreateSerializer, MedicineBillReadSerializer
from .services import MedicineBillService


class MedicineBillViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    POST   /medicine-bills/                 bill + FEFO stock posting
    DELETE /medicine-bills/{id}/            reverse stock, delete bill
    POST   /medicine-bills/{id}/receipts/   record a payment
    """

    permission_classes = [IsAuthenticated, IsAdminOrFranchiseStaff]
    serializer_class = MedicineBillReadSerializer
    filterset_fields = ['patient']
    search_fields = ['bill_number', 'patient__name']
    ordering_fields = ['bill_date', 'total_amount']
    ordering = ['-bill_date']

    def get_queryset(self):
        qs = (
            MedicineBill.objects
            .select_related('franchise', 'patient')
            .prefetch_related('details__medicine', 'receipts')
        )
        user = self.request.user
        if not user.is_admin_role:
            return qs.filter(franchise_id=user.franchise_id)
        franchise = self.request.query_params.get('franchise')
        if franchise:
            qs = qs.filter(franchise_id=franchise)
        return qs

    def create(self, request, *args, **kwargs):
        ser = MedicineBillCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        franchise_id = FranchiseResolver.resolve_franchise_id(request.user, data.get('franchise'))
        bill = MedicineBillService.create_bill(
            franchise_id=franchise_id,
            patient_id=data.get('patient'),
            bill_date=data.get('bill_date'),
            discount_percent=data['discount_percent'],
            total_amount=data.get('total_amount'),
            details=data['medicine_bill_details'],
            receipt=data.get('receipt'),
            actor=request.user,
        )
        return Response(
            {'success': True, 'data': MedicineBillReadSerializer(bill).data},
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, *args, **kwargs):
        bill = self.get_object()
        MedicineBillService.delete_bill(bill_id=bill.pk, actor=request.user)
        return Response({'success': True, 'data': {'id': str(bill.pk)}})

    @action(detail=True, methods=['post'], url_path='receipts')
    def receipts(self, request, pk=None):
        bill = self.get_object()
        ser = ReceiptWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        receipt = MedicineBillService.add_receipt(
            bill_id=bill.pk, receipt=ser.validated_data, actor=request.user,
        )
        return Response(
            {'success': True, 'data': ReceiptReadSerializer(receipt).data},
            status=status.HTTP_201_CREATED,
        )
