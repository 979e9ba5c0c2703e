"""
Inventory — URL Configuration

@file inventory/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AdminStockViewSet, StockViewSet

app_name = 'inventory'

router = DefaultRouter()
router.register('stocks', StockViewSet, basename='stock')
router.register('admin-stocks', AdminStockViewSet, basename='admin-stock')

urlpatterns = [
    path('', include(router.urls)),
]
