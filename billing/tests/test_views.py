"""
Billing — API Integration Tests

@file billing/tests/test_views.py
"""

from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from billing.models import MedicineBill
from inventory.models import StockBalance
from tests.factories import FranchiseFactory, MedicineFactory, UserFactory, seed_batches


@pytest.fixture
def stocked_medicine(user):
    medicine = MedicineFactory(name='Ibuprofen 400', mrp=Decimal('5.00'))
    seed_batches(user.franchise, medicine, [('B1', 120, 5), ('B2', 200, 10)])
    return medicine


@pytest.mark.django_db
class TestMedicineBillCreate:
    def post(self, client, payload):
        return client.post(reverse('api-v1:billing:medicine-bill-list'), payload, format='json')

    def test_create_posts_stock(self, authenticated_client, user, stocked_medicine):
        resp = self.post(authenticated_client, {
            'medicine_bill_details': [{'medicine': str(stocked_medicine.pk), 'qty': 8}],
            'total_amount': '40.00',
        })
        assert resp.status_code == status.HTTP_201_CREATED
        data = resp.data['data']
        assert data['bill_number'].startswith('M-')
        assert str(data['franchise']) == str(user.franchise_id)
        assert data['stock_transaction']['txn_no'].startswith('ST-')
        assert StockBalance.objects.get(franchise=user.franchise).quantity == 7

    def test_insufficient_names_medicine(self, authenticated_client, stocked_medicine):
        resp = self.post(authenticated_client, {
            'medicine_bill_details': [{'medicine': str(stocked_medicine.pk), 'qty': 20}],
        })
        assert resp.status_code == status.HTTP_409_CONFLICT
        assert resp.data['success'] is False
        assert resp.data['code'] == 'INSUFFICIENT_STOCK'
        assert resp.data['errors']['medicine_name'] == 'Ibuprofen 400'
        assert resp.data['errors']['available'] == 15
        assert resp.data['errors']['required'] == 20

    def test_total_mismatch(self, authenticated_client, stocked_medicine):
        resp = self.post(authenticated_client, {
            'medicine_bill_details': [{'medicine': str(stocked_medicine.pk), 'qty': 2}],
            'total_amount': '99.00',
        })
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data['code'] == 'TOTAL_MISMATCH'

    def test_unknown_medicine(self, authenticated_client):
        resp = self.post(authenticated_client, {
            'medicine_bill_details': [{'medicine': '00000000-0000-0000-0000-000000000000', 'qty': 1}],
        })
        assert resp.status_code == status.HTTP_404_NOT_FOUND

    def test_staff_franchise_overrides_payload(self, authenticated_client, user, stocked_medicine):
        resp = self.post(authenticated_client, {
            'franchise': str(FranchiseFactory().pk),
            'medicine_bill_details': [{'medicine': str(stocked_medicine.pk), 'qty': 1}],
        })
        assert resp.status_code == status.HTTP_201_CREATED
        assert MedicineBill.objects.get().franchise_id == user.franchise_id

    def test_admin_must_name_franchise(self, admin_client):
        resp = self.post(admin_client, {
            'medicine_bill_details': [{'medicine': str(MedicineFactory().pk), 'qty': 1}],
        })
        assert resp.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestMedicineBillLifecycle:
    def create(self, client, medicine, qty=8):
        resp = client.post(
            reverse('api-v1:billing:medicine-bill-list'),
            {'medicine_bill_details': [{'medicine': str(medicine.pk), 'qty': qty}]},
            format='json',
        )
        return resp.data['data']['id']

    def test_delete_restores_stock(self, authenticated_client, user, stocked_medicine):
        bill_id = self.create(authenticated_client, stocked_medicine)
        resp = authenticated_client.delete(reverse('api-v1:billing:medicine-bill-detail', args=[bill_id]))
        assert resp.status_code == status.HTTP_200_OK
        assert StockBalance.objects.get(franchise=user.franchise).quantity == 15

    def test_receipt_overpayment(self, authenticated_client, stocked_medicine):
        bill_id = self.create(authenticated_client, stocked_medicine, qty=2)
        url = reverse('api-v1:billing:medicine-bill-receipts', args=[bill_id])
        resp = authenticated_client.post(url, {'payment_mode': 'CASH', 'amount': '10.00'}, format='json')
        assert resp.status_code == status.HTTP_201_CREATED
        resp = authenticated_client.post(url, {'payment_mode': 'CASH', 'amount': '0.01'}, format='json')
        assert resp.data['code'] == 'RECEIPT_EXCEEDS_OUTSTANDING'

    def test_upi_requires_utr(self, authenticated_client, stocked_medicine):
        bill_id = self.create(authenticated_client, stocked_medicine, qty=2)
        url = reverse('api-v1:billing:medicine-bill-receipts', args=[bill_id])
        resp = authenticated_client.post(url, {'payment_mode': 'UPI', 'amount': '5.00'}, format='json')
        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_franchise_cannot_see_bill(self, authenticated_client, stocked_medicine):
        bill_id = self.create(authenticated_client, stocked_medicine)
        authenticated_client.force_authenticate(user=UserFactory())
        resp = authenticated_client.get(reverse('api-v1:billing:medicine-bill-detail', args=[bill_id]))
        assert resp.status_code == status.HTTP_404_NOT_FOUND
