"""
Users — Models

Custom User model with UUID PK and phone-based auth. Each user holds
one role: ADMIN (head office) or FRANCHISE (staff of one franchise).
Franchise staff are attached to their franchise directly.

@file users/models.py
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import ROLE_ADMIN, ROLE_FRANCHISE
from core.models import RegulatedModel
from users.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin, RegulatedModel):
    """
    Custom user for ClinicStock.

    Authentication is phone-based. ADMIN users operate the head-office
    stock pool, sales and transports; FRANCHISE users bill patients and
    receive deliveries for their own franchise only.
    """

    class StatusChoices(models.TextChoices):
        ACTIVE = 'ACTIVE', _('Active')
        SUSPENDED = 'SUSPENDED', _('Suspended')

    class RoleChoices(models.TextChoices):
        ADMIN = ROLE_ADMIN, _('Head office admin')
        FRANCHISE = ROLE_FRANCHISE, _('Franchise staff')

    phone = models.CharField(_('phone'), max_length=20, unique=True)
    email = models.EmailField(_('email'), unique=True, null=True, blank=True)
    first_name = models.CharField(_('first name'), max_length=100, blank=True)
    last_name = models.CharField(_('last name'), max_length=100, blank=True)

    role = models.CharField(
        _('role'), max_length=12,
        choices=RoleChoices.choices, default=RoleChoices.FRANCHISE,
        db_index=True,
    )
    status = models.CharField(
        _('status'), max_length=12,
        choices=StatusChoices.choices, default=StatusChoices.ACTIVE,
        db_index=True,
    )
    franchise = models.ForeignKey(
        'franchises.Franchise',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='staff',
        verbose_name=_('franchise'),
    )

    is_staff = models.BooleanField(_('staff status'), default=False)
    is_active = models.BooleanField(_('active'), default=True)
    date_joined = models.DateTimeField(_('date joined'), default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = 'phone'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role', 'status']),
            models.Index(fields=['franchise']),
        ]

    def __str__(self):
        return self.get_full_name() or self.phone

    def get_full_name(self):
        full = f'{self.first_name} {self.last_name}'.strip()
        return full or self.phone

    def get_short_name(self):
        return self.first_name or self.phone

    def has_role(self, role_name: str) -> bool:
        return self.role == role_name

    @property
    def is_admin_role(self) -> bool:
        return self.is_superuser or self.role == self.RoleChoices.ADMIN
