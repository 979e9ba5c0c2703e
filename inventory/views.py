"""
Inventory — Views

Franchise stock queries, recall, and the head-office admin pool.

@file inventory/views.py
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from users.permissions import IsAdminOrFranchiseStaff, IsAdminRole

from .admin_pool import AdminStockService, RefillItem
from .models import AdminStockBalance, StockBalance, StockBatchBalance, StockLedger, StockRecall
from .serializers import (
    AdminStockBalanceSerializer,
    AdminStockBatchBalanceSerializer,
    RecallRequestSerializer,
    RefillSerializer,
    StockBalanceSerializer,
    StockBatchBalanceSerializer,
    StockLedgerSerializer,
    StockRecallSerializer,
)
from .services import RecallService


class FranchiseScopedMixin:
    """Franchise staff see their own franchise; admins may filter with ?franchise=."""

    def scope(self, qs):
        user = self.request.user
        if not user.is_admin_role:
            return qs.filter(franchise_id=user.franchise_id)
        franchise = self.request.query_params.get('franchise')
        if franchise:
            qs = qs.filter(franchise_id=franchise)
        return qs

    def paginated(self, qs, serializer_class):
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return Response({'success': True, 'data': serializer_class(qs, many=True).data})


class StockViewSet(FranchiseScopedMixin, viewsets.ReadOnlyModelViewSet):
    """
    GET  /stocks/             aggregate balances
    GET  /stocks/batches/     batch rows with days to expiry
    GET  /stocks/ledger/      ledger lines
    POST /stocks/recall/      recall a near-expiry batch (admin)
    GET  /stocks/recalls/     recall history (admin)
    """

    permission_classes = [IsAuthenticated, IsAdminOrFranchiseStaff]
    serializer_class = StockBalanceSerializer
    filterset_fields = ['medicine']
    search_fields = ['medicine__name']
    ordering = ['medicine__name']

    def get_queryset(self):
        return self.scope(StockBalance.objects.select_related('franchise', 'medicine'))

    @action(detail=False, methods=['get'], url_path='batches')
    def batches(self, request):
        qs = self.scope(StockBatchBalance.objects.select_related('franchise', 'medicine'))
        medicine = request.query_params.get('medicine')
        if medicine:
            qs = qs.filter(medicine_id=medicine)
        if request.query_params.get('in_stock') == 'true':
            qs = qs.filter(quantity__gt=0)
        return self.paginated(qs.order_by('expiry_date', 'created_at'), StockBatchBalanceSerializer)

    @action(detail=False, methods=['get'], url_path='ledger')
    def ledger(self, request):
        qs = self.scope(StockLedger.objects.select_related('transaction', 'medicine'))
        medicine = request.query_params.get('medicine')
        if medicine:
            qs = qs.filter(medicine_id=medicine)
        return self.paginated(qs.order_by('-created_at'), StockLedgerSerializer)

    @action(
        detail=False, methods=['post'], url_path='recall',
        permission_classes=[IsAuthenticated, IsAdminRole],
    )
    def recall(self, request):
        ser = RecallRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        recall = RecallService.recall(
            franchise_id=data['franchise'],
            medicine_id=data['medicine'],
            batch_number=data['batch_number'],
            expiry_date=data['expiry_date'],
            quantity=data['quantity'],
            notes=data['notes'],
            actor=request.user,
        )
        return Response(
            {'success': True, 'data': StockRecallSerializer(recall).data},
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=False, methods=['get'], url_path='recalls',
        permission_classes=[IsAuthenticated, IsAdminRole],
    )
    def recalls(self, request):
        qs = self.scope(
            StockRecall.objects.select_related('franchise', 'medicine', 'stock_transaction'),
        )
        return self.paginated(qs, StockRecallSerializer)


class AdminStockViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET  /admin-stocks/                    pool balance per medicine
    GET  /admin-stocks/batches/?medicine=  refilled batches beyond the horizon
    POST /admin-stocks/refill/             top up the pool
    """

    permission_classes = [IsAuthenticated, IsAdminRole]
    serializer_class = AdminStockBalanceSerializer
    filterset_fields = ['medicine']
    search_fields = ['medicine__name']
    ordering = ['medicine__name']

    def get_queryset(self):
        return AdminStockBalance.objects.select_related('medicine')

    @action(detail=False, methods=['get'], url_path='batches')
    def batches(self, request):
        medicine = request.query_params.get('medicine')
        if not medicine:
            raise ValidationError({'medicine': ['This query parameter is required.']})
        qs = AdminStockService.eligible_batches(medicine).select_related('medicine')
        return Response({'success': True, 'data': AdminStockBatchBalanceSerializer(qs, many=True).data})

    @action(detail=False, methods=['post'], url_path='refill')
    def refill(self, request):
        ser = RefillSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        items = [
            RefillItem(
                medicine_id=item['medicine'].pk,
                quantity=item['quantity'],
                batch_number=item['batch_number'] or None,
                expiry_date=item['expiry_date'],
            )
            for item in ser.validated_data['items']
        ]
        balances = AdminStockService.refill(items, actor=request.user)
        return Response(
            {'success': True, 'data': AdminStockBalanceSerializer(balances, many=True).data},
            status=status.HTTP_201_CREATED,
        )
