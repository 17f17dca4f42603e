from __future__ import annotations
"""Audit decorator recording one AuditLog per completed mutating view.

Usage examples:

@coupons_bp.put('/coupons/<coupon_id>')
@require_capability(COUPONS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Coupon, id_arg='coupon_id')
def update_coupon(coupon_id, actor): ...

@audit_mutation(AuditLog.ACTION_CREATE, Merchant)   # entity id read from returned JSON 'id'
def create_merchant(actor): ...

Parameters:
  action: CREATE | UPDATE | DELETE
  model: mapped class whose rows are snapshotted; its name becomes entity_type
  id_arg: view keyword argument holding the entity id (UPDATE / DELETE)
  id_key: key in the returned JSON payload holding the entity id (CREATE)
  entity_type: override for the recorded entity type name

Sequence:
  1. UPDATE / DELETE: before-image loaded and snapshotted before the view runs.
  2. The view runs; any exception propagates and nothing is recorded.
  3. CREATE / UPDATE: after-image reloaded once the view has committed.
  4. AuditRecorder.record is called exactly once; it never raises.

Must sit below the require_* decorator so ``actor`` is present in kwargs;
calling the wrapped view without it raises RuntimeError.
"""

import logging
from functools import wraps
from typing import Any, Optional

from couponops import get_db
from couponops.models.audit import AuditLog
from couponops.services.audit import get_audit_recorder, snapshot
from couponops.services.guard import client_ip, user_agent

logger = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Return the JSON-able dict part of a Flask view return value."""
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def audit_mutation(
    action: str,
    model,
    *,
    id_arg: Optional[str] = None,
    id_key: str = 'id',
    entity_type: Optional[str] = None,
):
    if action not in AuditLog.ALL_ACTIONS:
        raise ValueError(f'unknown audit action {action!r}')
    type_name = entity_type or model.__name__

    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if 'actor' not in kwargs:
                raise RuntimeError(
                    f'audit_mutation on {fn.__name__} must be applied below require_capability'
                )
            before = None
            if action != AuditLog.ACTION_CREATE and id_arg:
                existing = get_db().get(model, kwargs.get(id_arg))
                # copy now: the view is about to mutate the same instance
                before = snapshot(existing)
            rv = fn(*args, **kwargs)
            try:
                entity_id = kwargs.get(id_arg) if id_arg else None
                if entity_id is None:
                    data = _extract_payload(rv)
                    if isinstance(data, dict):
                        entity_id = data.get(id_key)
                after = None
                if action != AuditLog.ACTION_DELETE and entity_id is not None:
                    after = get_db().get(model, entity_id)
                get_audit_recorder().record(
                    kwargs['actor'].id,
                    action,
                    type_name,
                    entity_id,
                    before=before,
                    after=after,
                    ip=client_ip(),
                    user_agent=user_agent(),
                )
            except Exception:
                # audit must not interfere with a response that already succeeded
                logger.exception('Audit capture failed for %s %s', action, type_name)
            return rv
        return wrapper
    return outer


def record_mutation(actor, action: str, entity_type: str, entity_id: Any, before: Any = None, after: Any = None):
    """Record one mutation from inside a view, for cases where the action is only known after a lookup.

    Same guarantees as the decorator: called after commit, never raises.
    """
    get_audit_recorder().record(
        actor.id, action, entity_type, entity_id,
        before=before, after=after, ip=client_ip(), user_agent=user_agent(),
    )
