from __future__ import annotations
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
from flask import current_app
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session
from couponops.models.audit import AuditLog

logger = logging.getLogger(__name__)

# Single deny-list for every snapshot; add new secret column names here only.
SECRET_FIELDS = frozenset({'password', 'password_hash', 'token', 'access_token', 'refresh_token'})


def _fields_of(record: Any) -> Dict[str, Any]:
    if isinstance(record, Mapping):
        return dict(record)
    state = sa_inspect(record, raiseerr=False)
    if state is None or not hasattr(state, 'mapper'):
        raise TypeError(f'cannot snapshot {type(record).__name__}')
    return {attr.key: getattr(record, attr.key) for attr in state.mapper.column_attrs}


def snapshot(record: Any) -> Optional[Dict[str, Any]]:
    """Shallow copy of a record's fields with secret fields removed.

    Accepts a mapping or a mapped ORM instance. Knows nothing about entity types; every
    non-secret key is carried over unchanged.
    """
    if record is None:
        return None
    return {k: v for k, v in _fields_of(record).items() if k not in SECRET_FIELDS}


def _jsonable_value(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


def to_jsonable(data: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if data is None:
        return None
    return {k: _jsonable_value(v) for k, v in data.items()}


class AuditRecorder:
    """Best-effort writer of immutable audit records.

    ``record`` never raises: a mutation that already succeeded is not reported as failed
    because its audit row could not be written. Failures are logged and dropped. Writes
    go through their own session so the caller's transaction is never touched.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def record(
        self,
        actor_id: Optional[str],
        action: str,
        entity_type: str,
        entity_id: Any,
        before: Any = None,
        after: Any = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        try:
            if action not in AuditLog.ALL_ACTIONS:
                raise ValueError(f'unknown audit action {action!r}')
            entry = AuditLog(
                admin_id=actor_id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id),
                before=to_jsonable(snapshot(before)),
                after=to_jsonable(snapshot(after)),
                ip_address=ip,
                user_agent=user_agent,
            )
            session = self.session_factory()
            try:
                session.add(entry)
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()
        except Exception:
            logger.exception('Failed to write audit log %s %s/%s', action, entity_type, entity_id)


def get_audit_recorder() -> AuditRecorder:
    return current_app.extensions['audit_recorder']


__all__ = ['SECRET_FIELDS', 'snapshot', 'to_jsonable', 'AuditRecorder', 'get_audit_recorder']
