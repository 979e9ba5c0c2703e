"""
Sales — Views

Sales are managed by head office. Transports are listed for both sides;
PATCH is role-gated: admins plan and dispatch, the receiving franchise
confirms delivery.

@file sales/views.py
"""

from rest_framework import mixins, status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import BusinessRuleViolation
from users.permissions import IsAdminOrFranchiseStaff, IsAdminRole

from .models import Sale, Transport
from .serializers import (
    SaleReadSerializer,
    SaleWriteSerializer,
    TransportCreateSerializer,
    TransportReadSerializer,
    TransportWriteSerializer,
)
from .services import SaleService, TransportService


class SaleViewSet(viewsets.ModelViewSet):
    """
    POST   /sales/        sale + PENDING transport
    PATCH  /sales/{id}/   edit; booked stock is reversed and re-posted
    DELETE /sales/{id}/   reverse booked stock, delete
    """

    serializer_class = SaleReadSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filterset_fields = ['franchise']
    search_fields = ['invoice_no', 'franchise__name']
    ordering_fields = ['invoice_date', 'total_amount']
    ordering = ['-invoice_date']

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            return [IsAuthenticated(), IsAdminOrFranchiseStaff()]
        return [IsAuthenticated(), IsAdminRole()]

    def get_queryset(self):
        qs = (
            Sale.objects.select_related('franchise')
            .prefetch_related('details__medicine', 'transports__details__sale_detail', 'transports__franchise')
        )
        user = self.request.user
        if not user.is_admin_role:
            return qs.filter(franchise_id=user.franchise_id)
        return qs

    def create(self, request, *args, **kwargs):
        ser = SaleWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        sale = SaleService.create_sale(
            franchise_id=data['franchise'],
            sale_details=data['sale_details'],
            discount_percent=data.get('discount_percent', 0),
            total_amount=data.get('total_amount'),
            invoice_date=data.get('invoice_date'),
            notes=data.get('notes', ''),
            actor=request.user,
        )
        return Response(
            {'success': True, 'data': SaleReadSerializer(sale).data},
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, *args, **kwargs):
        instance = self.get_object()
        ser = SaleWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        sale = SaleService.update_sale(
            sale_id=instance.pk,
            franchise_id=data.get('franchise'),
            sale_details=data.get('sale_details'),
            discount_percent=data.get('discount_percent'),
            total_amount=data.get('total_amount'),
            invoice_date=data.get('invoice_date'),
            notes=data.get('notes'),
            actor=request.user,
        )
        return Response({'success': True, 'data': SaleReadSerializer(sale).data})

    def destroy(self, request, *args, **kwargs):
        # Looked up by the service so a missing sale is a plain 404.
        SaleService.delete_sale(sale_id=kwargs['pk'], actor=request.user)
        return Response({'success': True, 'data': {'id': str(kwargs['pk'])}})


class TransportViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    POST  /transports/        dispatch a sale (admin)
    PATCH /transports/{id}/   admin: logistics / dispatch; franchise: DELIVERED only
    """

    permission_classes = [IsAuthenticated, IsAdminOrFranchiseStaff]
    serializer_class = TransportReadSerializer
    filterset_fields = ['status', 'sale']
    search_fields = ['tracking_number', 'transporter_name', 'company_name', 'sale__invoice_no']
    ordering = ['-created_at']

    def get_queryset(self):
        qs = Transport.objects.select_related('sale', 'franchise').prefetch_related('details__sale_detail')
        user = self.request.user
        if not user.is_admin_role:
            return qs.filter(franchise_id=user.franchise_id)
        return qs

    def create(self, request, *args, **kwargs):
        if not request.user.is_admin_role:
            raise PermissionDenied('Only head office can dispatch transports.')
        ser = TransportCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        transport = TransportService.create_transport(
            sale_id=data.pop('sale'), data=data, actor=request.user,
        )
        return Response(
            {'success': True, 'data': TransportReadSerializer(transport).data},
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, *args, **kwargs):
        ser = TransportWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        if request.user.is_admin_role:
            transport = TransportService.admin_update(
                transport_id=kwargs['pk'], data=data, actor=request.user,
            )
        else:
            if set(data) != {'status'} or data['status'] != Transport.Status.DELIVERED:
                raise BusinessRuleViolation(
                    detail='Franchise users can only mark a transport DELIVERED.',
                    code='DELIVERED_BY_FRANCHISE_ONLY',
                )
            transport = TransportService.deliver(transport_id=kwargs['pk'], actor=request.user)

        transport.refresh_from_db()
        return Response({'success': True, 'data': TransportReadSerializer(transport).data})
