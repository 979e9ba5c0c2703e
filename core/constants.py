"""
Core — Constants

Shared constants: audit action names, pagination limits, document number
prefixes.

@file core/constants.py
"""

# ---------------------------------------------------------------------------
# Audit actions (mirror AuditLog.ActionChoices)
# ---------------------------------------------------------------------------

AUDIT_ACTION_CREATE = 'CREATE'
AUDIT_ACTION_UPDATE = 'UPDATE'
AUDIT_ACTION_DELETE = 'DELETE'
AUDIT_ACTION_STATUS_CHANGE = 'STATUS_CHANGE'
AUDIT_ACTION_STOCK_POSTING = 'STOCK_POSTING'
AUDIT_ACTION_STOCK_REVERSAL = 'STOCK_REVERSAL'


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200


# ---------------------------------------------------------------------------
# Document numbers: {PREFIX}-DDMMYYYY-NNNN
# ---------------------------------------------------------------------------

NUMBER_PREFIX_SALE = 'S'
NUMBER_PREFIX_STOCK_TRANSACTION = 'ST'
NUMBER_PREFIX_MEDICINE_BILL = 'M'
NUMBER_PREFIX_MEDICINE_BILL_RECEIPT = 'RM'
NUMBER_PREFIX_CONSULTATION_RECEIPT = 'R'
NUMBER_PREFIX_PATIENT = 'P'
NUMBER_SEQUENCE_WIDTH = 4


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

ROLE_ADMIN = 'ADMIN'
ROLE_FRANCHISE = 'FRANCHISE'
