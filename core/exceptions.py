"""
Core — Exception Handling

Domain exceptions raised by the service layer and the DRF exception
handler producing the standard error envelope.

@file core/exceptions.py
"""

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('clinicstock')


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class BusinessRuleViolation(APIException):
    """Raised when a business rule is violated at the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Business rule violation.'
    default_code = 'BUSINESS_RULE_VIOLATION'

    def __init__(self, detail=None, code=None):
        if code is not None:
            self.reason = code
        super().__init__(detail=detail, code=code)


class InsufficientStockError(APIException):
    """
    Raised when eligible stock cannot cover a requested quantity.

    Carries the medicine and the exact shortfall so the boundary can name
    them; never partially fulfilled.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Insufficient stock for this operation.'
    default_code = 'INSUFFICIENT_STOCK'

    def __init__(self, *, medicine_id=None, medicine_name='', available=0, required=0, detail=None):
        self.medicine_id = medicine_id
        self.medicine_name = medicine_name
        self.available = available
        self.required = required
        if detail is None:
            label = medicine_name or medicine_id or 'medicine'
            detail = f'Insufficient stock for {label}. Available: {available}, Requested: {required}'
        super().__init__(detail=detail)

    def as_dict(self) -> dict:
        return {
            'medicine_id': str(self.medicine_id) if self.medicine_id else None,
            'medicine_name': self.medicine_name,
            'available': self.available,
            'required': self.required,
        }


class InsufficientAdminStockError(InsufficientStockError):
    default_detail = 'Insufficient admin stock to post delivery.'
    default_code = 'INSUFFICIENT_ADMIN_STOCK'


class StateConflict(APIException):
    """
    Raised when a request conflicts with the current state of a record.
    ``code`` is a machine-checkable reason, e.g. SALE_DELIVERED.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Request conflicts with the current state.'
    default_code = 'STATE_CONFLICT'

    def __init__(self, detail=None, code=None, status_code=None):
        if status_code is not None:
            self.status_code = status_code
        self.reason = code or self.default_code
        super().__init__(detail=detail, code=self.reason)


class InvalidReferenceError(APIException):
    """Unknown medicine / patient / appointment / sale line in a payload."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Referenced record not found.'
    default_code = 'INVALID_REFERENCE'

    def __init__(self, detail=None, code=None, status_code=None):
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail=detail, code=code)


class TotalMismatchError(BusinessRuleViolation):
    default_detail = 'Submitted amounts do not match the computed amounts.'
    default_code = 'TOTAL_MISMATCH'


class NoFranchiseError(BusinessRuleViolation):
    default_detail = 'Current user is not associated with any franchise.'
    default_code = 'NO_FRANCHISE'


class ResourceNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'RESOURCE_NOT_FOUND'


# ---------------------------------------------------------------------------
# Standard exception handler
# ---------------------------------------------------------------------------

def _error_code(exc) -> str:
    reason = getattr(exc, 'reason', None)
    if reason:
        return reason
    return getattr(exc, 'default_code', 'ERROR')


def standard_exception_handler(exc, context):
    """
    Wraps every error response in the standard envelope:
      { "success": false, "errors": {...}, "code": "ERROR_CODE" }
    """
    if isinstance(exc, Http404):
        exc = ResourceNotFoundError()
    elif isinstance(exc, PermissionDenied):
        exc = APIException(detail='Permission denied.', code='PERMISSION_DENIED')
        exc.status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, ValidationError):
        data = {
            'success': False,
            'errors': exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages},
            'code': 'VALIDATION_ERROR',
        }
        return Response(data, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)

    if response is not None:
        errors = {}
        code = _error_code(exc)

        if isinstance(response.data, dict):
            errors = response.data
            code = response.data.pop('code', code) if 'code' in response.data else code
        elif isinstance(response.data, list):
            errors = {'detail': response.data}
        else:
            errors = {'detail': [str(response.data)]}

        if isinstance(exc, InsufficientStockError):
            errors.update(exc.as_dict())
            logger.warning('Stock insufficiency: %s', exc.detail)

        response.data = {
            'success': False,
            'errors': errors,
            'code': code,
        }

    if response is None:
        logger.exception('Unhandled exception in view: %s', exc)
        return Response(
            {'success': False, 'errors': {'detail': ['Internal server error.']}, 'code': 'INTERNAL_ERROR'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return response
