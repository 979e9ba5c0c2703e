"""
Medicines — API Integration Tests

@file medicines/tests/test_views.py
"""

import pytest
from django.urls import reverse
from rest_framework import status

from medicines.models import Medicine
from tests.factories import BrandFactory, MedicineFactory


@pytest.mark.django_db
class TestMedicineEndpoints:
    def test_list_for_franchise_staff(self, authenticated_client):
        MedicineFactory.create_batch(3)
        resp = authenticated_client.get(reverse('api-v1:medicines:medicine-list'))
        assert resp.status_code == status.HTTP_200_OK
        assert len(resp.data['results']) == 3

    def test_deleted_medicines_hidden(self, authenticated_client):
        MedicineFactory().soft_delete()
        resp = authenticated_client.get(reverse('api-v1:medicines:medicine-list'))
        assert resp.data['results'] == []

    def test_create_as_admin(self, admin_client):
        brand = BrandFactory()
        resp = admin_client.post(
            reverse('api-v1:medicines:medicine-list'),
            {'name': 'Metformin 500', 'brand': str(brand.pk), 'rate': '3.50', 'mrp': '5.00'},
            format='json',
        )
        assert resp.status_code == status.HTTP_201_CREATED
        assert Medicine.objects.filter(name='Metformin 500').exists()

    def test_create_forbidden_for_franchise(self, authenticated_client):
        resp = authenticated_client.post(
            reverse('api-v1:medicines:medicine-list'),
            {'name': 'X', 'rate': '1.00', 'mrp': '2.00'},
            format='json',
        )
        assert resp.status_code == status.HTTP_403_FORBIDDEN

    def test_mrp_below_rate(self, admin_client):
        resp = admin_client.post(
            reverse('api-v1:medicines:medicine-list'),
            {'name': 'X', 'rate': '5.00', 'mrp': '2.00'},
            format='json',
        )
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert 'mrp' in resp.data['errors']

    def test_deactivate(self, admin_client):
        medicine = MedicineFactory()
        resp = admin_client.post(reverse('api-v1:medicines:medicine-deactivate', args=[medicine.pk]))
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data['data']['is_active'] is False

    def test_destroy_is_soft(self, admin_client):
        medicine = MedicineFactory()
        resp = admin_client.delete(reverse('api-v1:medicines:medicine-detail', args=[medicine.pk]))
        assert resp.status_code == status.HTTP_204_NO_CONTENT
        medicine.refresh_from_db()
        assert medicine.is_deleted is True


@pytest.mark.django_db
class TestBrandEndpoints:
    def test_create_brand(self, admin_client):
        resp = admin_client.post(reverse('api-v1:medicines:brand-list'), {'name': 'Mankind'}, format='json')
        assert resp.status_code == status.HTTP_201_CREATED

    def test_list_brands(self, authenticated_client):
        BrandFactory.create_batch(2)
        resp = authenticated_client.get(reverse('api-v1:medicines:brand-list'))
        assert len(resp.data['results']) == 2
