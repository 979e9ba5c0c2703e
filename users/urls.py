"""
Users — Auth URL Configuration

@file users/urls.py
"""

from django.urls import path

from .views import LoginView, MeView, TokenRefreshAPIView

app_name = 'auth'

urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('refresh/', TokenRefreshAPIView.as_view(), name='token-refresh'),
    path('me/', MeView.as_view(), name='me'),
]
