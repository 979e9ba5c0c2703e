"""
Medicines — URL Configuration

@file medicines/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import BrandViewSet, MedicineViewSet

app_name = 'medicines'

router = DefaultRouter()
router.register('brands', BrandViewSet, basename='brand')
router.register('medicines', MedicineViewSet, basename='medicine')

urlpatterns = [
    path('', include(router.urls)),
]
