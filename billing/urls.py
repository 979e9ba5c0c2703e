"""
Billing — URL Configuration

@file billing/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import MedicineBillViewSet

app_name = 'billing'

router = DefaultRouter()
router.register('medicine-bills', MedicineBillViewSet, basename='medicine-bill')

urlpatterns = [
    path('', include(router.urls)),
]
