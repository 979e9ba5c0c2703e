"""
Users — Serializers

Current-user representation and custom JWT token claims.

@file users/serializers.py
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class UserReadSerializer(serializers.ModelSerializer):
    """Read-only user representation."""

    franchise_name = serializers.CharField(source='franchise.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id', 'phone', 'email', 'first_name', 'last_name',
            'role', 'status', 'franchise', 'franchise_name',
            'is_staff', 'is_active', 'date_joined',
        ]
        read_only_fields = fields


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Inject role and franchise into the JWT payload."""

    username_field = 'phone'

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['phone'] = user.phone
        token['role'] = user.role
        token['franchise_id'] = str(user.franchise_id) if user.franchise_id else None
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        if self.user.status != User.StatusChoices.ACTIVE:
            raise serializers.ValidationError(
                {'detail': f'Account status is {self.user.status}. Only ACTIVE accounts can log in.'},
                code='account_inactive',
            )
        data['user'] = UserReadSerializer(self.user).data
        return data
