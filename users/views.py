"""
Users — Views

Auth endpoints: login (JWT pair), refresh, current user.

@file users/views.py
"""

from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenRefreshView

from .serializers import CustomTokenObtainPairSerializer, UserReadSerializer


class LoginView(APIView):
    """POST /api/v1/auth/login/: JWT pair for an active user."""
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = CustomTokenObtainPairSerializer(
            data=request.data, context={'request': request},
        )
        serializer.is_valid(raise_exception=True)
        return Response({
            'success': True,
            'data': {
                'access': serializer.validated_data['access'],
                'refresh': serializer.validated_data['refresh'],
                'user': serializer.validated_data['user'],
            },
        })


class TokenRefreshAPIView(TokenRefreshView):
    """POST /api/v1/auth/refresh/"""
    pass


class MeView(APIView):
    """GET /api/v1/auth/me/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            'success': True,
            'data': UserReadSerializer(request.user).data,
        })
