"""
Users — Model Tests

@file users/tests/test_models.py
"""

import pytest

from tests.factories import AdminUserFactory, SuperuserFactory, UserFactory
from users.models import User


@pytest.mark.django_db
class TestUserModel:
    def test_create_user_via_manager(self):
        user = User.objects.create_user(phone='+919900000001', password='Secret2026!!')
        assert user.check_password('Secret2026!!')
        assert user.role == User.RoleChoices.FRANCHISE
        assert user.is_superuser is False

    def test_create_user_requires_phone(self):
        with pytest.raises(ValueError):
            User.objects.create_user(phone='')

    def test_create_superuser_is_admin(self):
        user = User.objects.create_superuser(phone='+919900000002', password='Secret2026!!')
        assert user.is_staff and user.is_superuser
        assert user.role == User.RoleChoices.ADMIN
        assert user.is_admin_role

    def test_franchise_staff_is_not_admin(self):
        user = UserFactory()
        assert user.franchise_id is not None
        assert user.is_admin_role is False
        assert user.has_role('FRANCHISE')

    def test_admin_role(self):
        assert AdminUserFactory().is_admin_role

    def test_superuser_without_admin_role_is_admin(self):
        user = SuperuserFactory(role=User.RoleChoices.FRANCHISE)
        assert user.is_admin_role

    def test_full_name_falls_back_to_phone(self):
        user = UserFactory(first_name='', last_name='')
        assert user.get_full_name() == user.phone

    def test_active_manager_excludes_suspended(self):
        active = UserFactory()
        UserFactory(status=User.StatusChoices.SUSPENDED)
        assert list(User.objects.active()) == [active]
