"""
Users — Service Layer Tests

Tests for FranchiseResolver.

@file users/tests/test_services.py
"""

import uuid

import pytest

from core.exceptions import NoFranchiseError, ResourceNotFoundError
from tests.factories import AdminUserFactory, FranchiseFactory, UserFactory
from users.services import FranchiseResolver


@pytest.mark.django_db
class TestResolveFranchise:
    def test_staff_always_gets_own_franchise(self):
        user = UserFactory()
        other = FranchiseFactory()
        assert FranchiseResolver.resolve_franchise_id(user, other.pk) == user.franchise_id

    def test_staff_without_franchise(self):
        user = UserFactory(franchise=None)
        with pytest.raises(NoFranchiseError):
            FranchiseResolver.resolve_franchise_id(user)

    def test_admin_names_franchise(self):
        franchise = FranchiseFactory()
        assert FranchiseResolver.resolve_franchise_id(AdminUserFactory(), franchise.pk) == franchise.pk

    def test_admin_unknown_franchise(self):
        with pytest.raises(ResourceNotFoundError):
            FranchiseResolver.resolve_franchise_id(AdminUserFactory(), uuid.uuid4())

    def test_admin_without_franchise(self):
        with pytest.raises(NoFranchiseError):
            FranchiseResolver.resolve_franchise_id(AdminUserFactory())


@pytest.mark.django_db
class TestCanAccessFranchise:
    def test_staff_own_franchise(self):
        user = UserFactory()
        assert FranchiseResolver.can_access_franchise(user, user.franchise_id)

    def test_staff_other_franchise(self):
        user = UserFactory()
        assert not FranchiseResolver.can_access_franchise(user, FranchiseFactory().pk)

    def test_admin_any_franchise(self):
        assert FranchiseResolver.can_access_franchise(AdminUserFactory(), FranchiseFactory().pk)
