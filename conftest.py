"""
ClinicStock — Root conftest for pytest

Shared fixtures available to all test modules.

@file conftest.py
"""

import pytest
from rest_framework.test import APIClient

from tests.factories import AdminUserFactory, FranchiseFactory, MedicineFactory, UserFactory


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def franchise(db):
    return FranchiseFactory()


@pytest.fixture
def other_franchise(db):
    return FranchiseFactory()


@pytest.fixture
def medicine(db):
    return MedicineFactory(name='Paracetamol 500')


@pytest.fixture
def user(db, franchise):
    """Franchise staff with default password TestPass2026!"""
    return UserFactory(franchise=franchise)


@pytest.fixture
def admin_user(db):
    """Head-office admin with default password TestPass2026!"""
    return AdminUserFactory()


@pytest.fixture
def authenticated_client(api_client, user):
    """API client authenticated as franchise staff."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def admin_client(db, admin_user):
    """API client authenticated as a head-office admin."""
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
