"""
Inventory — API Integration Tests

@file inventory/tests/test_views.py
"""

import pytest
from django.urls import reverse
from rest_framework import status

from inventory.models import AdminStockBalance, StockRecall
from tests.factories import FranchiseFactory, MedicineFactory, days_from_now, seed_admin_stock, seed_batches


@pytest.mark.django_db
class TestStockEndpoints:
    def test_staff_see_own_franchise_only(self, authenticated_client, user):
        medicine = MedicineFactory()
        seed_batches(user.franchise, medicine, [('A', 200, 5)])
        seed_batches(FranchiseFactory(), medicine, [('B', 200, 9)])
        resp = authenticated_client.get(reverse('api-v1:inventory:stock-list'))
        assert resp.status_code == status.HTTP_200_OK
        assert [row['quantity'] for row in resp.data['results']] == [5]

    def test_admin_filters_by_franchise(self, admin_client):
        medicine = MedicineFactory()
        franchise = FranchiseFactory()
        seed_batches(franchise, medicine, [('A', 200, 5)])
        seed_batches(FranchiseFactory(), medicine, [('B', 200, 9)])
        resp = admin_client.get(reverse('api-v1:inventory:stock-list'), {'franchise': str(franchise.pk)})
        assert [row['quantity'] for row in resp.data['results']] == [5]

    def test_batches_with_days_to_expiry(self, authenticated_client, user):
        medicine = MedicineFactory()
        seed_batches(user.franchise, medicine, [('LATE', 300, 1), ('EARLY', 100, 2)])
        resp = authenticated_client.get(reverse('api-v1:inventory:stock-batches'))
        rows = resp.data['results']
        assert [r['batch_number'] for r in rows] == ['EARLY', 'LATE']
        assert rows[0]['days_to_expiry'] == 100

    def test_unauthenticated(self, api_client):
        resp = api_client.get(reverse('api-v1:inventory:stock-list'))
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestRecallEndpoint:
    def payload(self, franchise, medicine, days=20, quantity=2):
        return {
            'franchise': str(franchise.pk),
            'medicine': str(medicine.pk),
            'batch_number': 'OLD',
            'expiry_date': days_from_now(days).isoformat(),
            'quantity': quantity,
        }

    def test_admin_recalls(self, admin_client):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('OLD', 20, 5)])
        resp = admin_client.post(
            reverse('api-v1:inventory:stock-recall'), self.payload(franchise, medicine), format='json',
        )
        assert resp.status_code == status.HTTP_201_CREATED
        assert resp.data['data']['txn_no'].startswith('ST-')
        assert StockRecall.objects.count() == 1

    def test_not_recallable(self, admin_client):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('OLD', 100, 5)])
        resp = admin_client.post(
            reverse('api-v1:inventory:stock-recall'), self.payload(franchise, medicine, days=100), format='json',
        )
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data['code'] == 'BATCH_NOT_RECALLABLE'

    def test_insufficient(self, admin_client):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('OLD', 20, 1)])
        resp = admin_client.post(
            reverse('api-v1:inventory:stock-recall'), self.payload(franchise, medicine), format='json',
        )
        assert resp.status_code == status.HTTP_409_CONFLICT

    def test_franchise_staff_forbidden(self, authenticated_client, user):
        medicine = MedicineFactory()
        resp = authenticated_client.post(
            reverse('api-v1:inventory:stock-recall'), self.payload(user.franchise, medicine), format='json',
        )
        assert resp.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestAdminStockEndpoints:
    def test_refill(self, admin_client):
        medicine = MedicineFactory()
        resp = admin_client.post(
            reverse('api-v1:inventory:admin-stock-refill'),
            {'items': [
                {'medicine': str(medicine.pk), 'quantity': 10,
                 'batch_number': 'RB1', 'expiry_date': days_from_now(200).isoformat()},
                {'medicine': str(medicine.pk), 'quantity': 5},
            ]},
            format='json',
        )
        assert resp.status_code == status.HTTP_201_CREATED
        assert AdminStockBalance.objects.get(medicine=medicine).quantity == 15

    def test_refill_expiry_too_soon(self, admin_client):
        medicine = MedicineFactory()
        resp = admin_client.post(
            reverse('api-v1:inventory:admin-stock-refill'),
            {'items': [{'medicine': str(medicine.pk), 'quantity': 10,
                        'batch_number': 'RB1', 'expiry_date': days_from_now(30).isoformat()}]},
            format='json',
        )
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data['code'] == 'EXPIRY_TOO_SOON'
        assert not AdminStockBalance.objects.exists()

    def test_list(self, admin_client):
        seed_admin_stock(MedicineFactory(), 7)
        resp = admin_client.get(reverse('api-v1:inventory:admin-stock-list'))
        assert [r['quantity'] for r in resp.data['results']] == [7]

    def test_batches_require_medicine(self, admin_client):
        resp = admin_client.get(reverse('api-v1:inventory:admin-stock-batches'))
        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_batches(self, admin_client):
        medicine = MedicineFactory()
        seed_admin_stock(medicine, 7, batch_number='AB1', days_to_expiry=200)
        resp = admin_client.get(reverse('api-v1:inventory:admin-stock-batches'), {'medicine': str(medicine.pk)})
        assert [r['batch_number'] for r in resp.data['data']] == ['AB1']

    def test_franchise_staff_forbidden(self, authenticated_client):
        resp = authenticated_client.get(reverse('api-v1:inventory:admin-stock-list'))
        assert resp.status_code == status.HTTP_403_FORBIDDEN
