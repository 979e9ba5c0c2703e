"""
Clinic — URL Configuration

@file clinic/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AppointmentViewSet, ConsultationViewSet, PatientViewSet, ServiceViewSet

app_name = 'clinic'

router = DefaultRouter()
router.register('patients', PatientViewSet, basename='patient')
router.register('services', ServiceViewSet, basename='service')
router.register('appointments', AppointmentViewSet, basename='appointment')
router.register('consultations', ConsultationViewSet, basename='consultation')

urlpatterns = [
    path('', include(router.urls)),
]
