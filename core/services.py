"""
Core — Audit Service

Every service-layer write records who did what to which row. Stock
postings log the transaction number and line count; reversals log the
quantities they put back.

@file core/services.py
"""

import logging
from decimal import Decimal
from typing import Any

from django.forms.models import model_to_dict

from core.models import AuditLog

logger = logging.getLogger('clinicstock')


class AuditService:

    @staticmethod
    def log(
        *,
        actor,
        action: str,
        model_name: str,
        object_id,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        entry = AuditLog.objects.create(
            actor=actor if getattr(actor, 'is_authenticated', False) else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            old_values=old_values,
            new_values=new_values,
        )
        logger.debug('Audit %s %s:%s', action, model_name, object_id)
        return entry

    @staticmethod
    def snapshot(instance, fields=None) -> dict[str, Any]:
        """JSON-safe dict of a row: decimals and UUIDs as strings, dates ISO-formatted."""
        cleaned: dict[str, Any] = {}
        for key, value in model_to_dict(instance, fields=fields).items():
            if isinstance(value, Decimal) or hasattr(value, 'hex'):
                cleaned[key] = str(value)
            elif hasattr(value, 'isoformat'):
                cleaned[key] = value.isoformat()
            else:
                cleaned[key] = value
        return cleaned
