"""
Franchises — Model Tests

@file franchises/tests/test_models.py
"""

import pytest

from core.exceptions import ResourceNotFoundError
from franchises.models import Franchise
from tests.factories import AdminUserFactory, FranchiseFactory
from users.services import FranchiseResolver


@pytest.mark.django_db
class TestFranchise:
    def test_str(self):
        franchise = FranchiseFactory(name='Jayanagar Clinic', code='JYN')
        assert str(franchise) == 'Jayanagar Clinic (JYN)'

    def test_soft_deleted_franchise_cannot_be_targeted(self):
        franchise = FranchiseFactory()
        franchise.soft_delete()
        assert Franchise.objects.filter(pk=franchise.pk).exists()
        with pytest.raises(ResourceNotFoundError):
            FranchiseResolver.resolve_franchise_id(AdminUserFactory(), franchise.pk)
