from __future__ import annotations
"""Reusable validation helpers for request payloads and status values.

All helpers raise 400 via ``abort`` so every route reports malformed input the same way.
Field maps passed to ``apply_fields`` pair each editable name with the accepted
Python type(s); wrap with ``optional`` when JSON null is allowed.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from flask import abort, request

NUMBER = (int, float)


def optional(*types: type) -> Tuple[type, ...]:
    return tuple(types) + (type(None),)


def json_body() -> Dict[str, Any]:
    """Request body as a dict; an empty body counts as ``{}``, anything else non-object aborts 400."""
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        abort(400, description='JSON object body required')
    return data


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or aborts with 400.
    """
    if not isinstance(new_status, str) or new_status not in tuple(allowed):
        abort(400, description=f"{field_name} invalid")
    return new_status


def require_fields(data: Dict[str, Any], *names: str):
    """Required fields are non-empty strings."""
    missing = [n for n in names if data.get(n) in (None, '')]
    if missing:
        abort(400, description=f"{', '.join(missing)} required")
    for name in names:
        if not isinstance(data[name], str):
            abort(400, description=f"{name} must be a string")


def parse_datetime(raw: Any, field_name: str) -> Optional[datetime]:
    if raw in (None, ''):
        return None
    try:
        dt = datetime.fromisoformat(str(raw).replace('Z', '+00:00'))
    except ValueError:
        abort(400, description=f"{field_name} must be ISO-8601")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _type_matches(value: Any, expected) -> bool:
    types = expected if isinstance(expected, tuple) else (expected,)
    # bool is an int subclass; only accept it where bool is listed
    if isinstance(value, bool):
        return bool in types
    return isinstance(value, types)


def apply_fields(entity, data: Dict[str, Any], fields: Mapping[str, Any], datetime_fields: Iterable[str] = ()):
    """Copy whitelisted keys present in data onto entity; returns names that were set.

    Every present value is type-checked against ``fields`` before anything is assigned.
    """
    dt_fields = set(datetime_fields)
    present = [name for name in fields if name in data]
    for name in present:
        expected = optional(str) if name in dt_fields else fields[name]
        if not _type_matches(data[name], expected):
            abort(400, description=f"{name} has the wrong type")
    for name in present:
        value = data[name]
        if name in dt_fields:
            value = parse_datetime(value, name)
        setattr(entity, name, value)
    return present

__all__ = [
    'NUMBER', 'optional', 'json_body', 'validate_status', 'require_fields', 'parse_datetime', 'apply_fields',
]
