"""
Sales — URL Configuration

@file sales/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import SaleViewSet, TransportViewSet

app_name = 'sales'

router = DefaultRouter()
router.register('sales', SaleViewSet, basename='sale')
router.register('transports', TransportViewSet, basename='transport')

urlpatterns = [
    path('', include(router.urls)),
]
