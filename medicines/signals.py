"""
Medicines — Signals

Audit logging for Medicine create/update. Rate changes matter because
every later ledger line is valued at the standing rate.

@file medicines/signals.py
"""

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from core.constants import AUDIT_ACTION_CREATE, AUDIT_ACTION_UPDATE
from core.services import AuditService

from .models import Medicine

_medicine_pre: dict = {}


@receiver(pre_save, sender=Medicine)
def medicine_pre_save(sender, instance, **kwargs):
    if instance.pk:
        try:
            old = Medicine.objects.get(pk=instance.pk)
            _medicine_pre[str(instance.pk)] = AuditService.snapshot(old)
        except Medicine.DoesNotExist:
            pass


@receiver(post_save, sender=Medicine)
def medicine_post_save(sender, instance, created, **kwargs):
    action = AUDIT_ACTION_CREATE if created else AUDIT_ACTION_UPDATE
    old = _medicine_pre.pop(str(instance.pk), None)
    new = AuditService.snapshot(instance)
    if not created and old == new:
        return
    AuditService.log(
        actor=getattr(instance, '_current_user', None),
        action=action,
        model_name='Medicine',
        object_id=str(instance.pk),
        old_values=old,
        new_values=new,
    )
