"""
Users — Service Layer

Resolves the franchise a request acts for. Franchise staff always act for
their own franchise; head-office admins may name one explicitly.

@file users/services.py
"""

import logging

from core.exceptions import NoFranchiseError, ResourceNotFoundError

logger = logging.getLogger('clinicstock')


class FranchiseResolver:
    """Given a user, return the franchise id their stock operations target."""

    @staticmethod
    def resolve_franchise_id(user, requested_franchise_id=None):
        if user.is_admin_role:
            if requested_franchise_id is not None:
                from franchises.models import Franchise

                if not Franchise.objects.filter(pk=requested_franchise_id, is_deleted=False).exists():
                    raise ResourceNotFoundError(detail='Franchise not found.')
                return requested_franchise_id
            if user.franchise_id:
                return user.franchise_id
            raise NoFranchiseError()

        if not user.franchise_id:
            raise NoFranchiseError()
        return user.franchise_id

    @staticmethod
    def can_access_franchise(user, franchise_id) -> bool:
        if user.is_admin_role:
            return True
        return user.franchise_id is not None and str(user.franchise_id) == str(franchise_id)
