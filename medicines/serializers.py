"""
Medicines — Serializers

@file medicines/serializers.py
"""

from rest_framework import serializers

from .models import Brand, Medicine


class BrandSerializer(serializers.ModelSerializer):
    class Meta:
        model = Brand
        fields = ['id', 'name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class MedicineReadSerializer(serializers.ModelSerializer):
    brand_name = serializers.CharField(source='brand.name', read_only=True, default=None)

    class Meta:
        model = Medicine
        fields = [
            'id', 'name', 'brand', 'brand_name',
            'rate', 'mrp', 'is_active',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class MedicineWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Medicine
        fields = ['name', 'brand', 'rate', 'mrp', 'is_active']

    def validate_rate(self, value):
        if value < 0:
            raise serializers.ValidationError('Rate cannot be negative.')
        return value

    def validate(self, attrs):
        rate = attrs.get('rate', getattr(self.instance, 'rate', None))
        mrp = attrs.get('mrp', getattr(self.instance, 'mrp', None))
        if rate is not None and mrp is not None and mrp < rate:
            raise serializers.ValidationError({'mrp': 'MRP cannot be lower than the rate.'})
        return attrs
