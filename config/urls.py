"""
ClinicStock — Root URL Configuration

All API endpoints are namespaced under /api/v1/.
The DRF browsable API is available for route inspection in development.

@file config/urls.py
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.reverse import reverse

admin.site.site_header = 'ClinicStock Administration'
admin.site.site_title = 'ClinicStock'
admin.site.index_title = 'Clinic, billing and franchise stock'


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request, format=None):
    """ClinicStock API v1 endpoint directory."""
    return Response({
        'auth': {
            'login': reverse('api-v1:auth:login', request=request, format=format),
            'refresh': reverse('api-v1:auth:token-refresh', request=request, format=format),
            'me': reverse('api-v1:auth:me', request=request, format=format),
        },
        'medicines': reverse('api-v1:medicines:medicine-list', request=request, format=format),
        'stocks': reverse('api-v1:inventory:stock-list', request=request, format=format),
        'admin_stocks': reverse('api-v1:inventory:admin-stock-list', request=request, format=format),
        'medicine_bills': reverse('api-v1:billing:medicine-bill-list', request=request, format=format),
        'consultations': reverse('api-v1:clinic:consultation-list', request=request, format=format),
        'sales': reverse('api-v1:sales:sale-list', request=request, format=format),
        'transports': reverse('api-v1:sales:transport-list', request=request, format=format),
    })


api_v1_patterns = [
    path('', api_root, name='api-root'),
    path('auth/', include('users.urls', namespace='auth')),
    path('', include('medicines.urls', namespace='medicines')),
    path('', include('inventory.urls', namespace='inventory')),
    path('', include('clinic.urls', namespace='clinic')),
    path('', include('billing.urls', namespace='billing')),
    path('', include('sales.urls', namespace='sales')),
]

urlpatterns = [
    path('admin/', admin.site.urls),

    # DRF session auth (powers the "Log in" button on the browsable API)
    path('api/auth/', include('rest_framework.urls', namespace='rest_framework')),

    # Versioned API
    path('api/v1/', include((api_v1_patterns, 'api-v1'))),
]
