from __future__ import annotations
from flask import Blueprint, abort
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import EXTENSION_READ, EXTENSION_WRITE
from couponops.decorators.audit import record_mutation
from couponops.decorators.auth import require_capability
from couponops.errors import NotFound
from couponops.models.audit import AuditLog
from couponops.models.extension_setting import ExtensionSetting
from couponops.services.audit import snapshot
from couponops.services.store import commit_or_conflict
from couponops.utils.serialization import iso
from couponops.utils.validation import json_body, optional, apply_fields

extension_bp = Blueprint('extension', __name__)

EDITABLE = {'description': optional(str)}


def _find_setting(session, key: str):
    return session.execute(select(ExtensionSetting).where(ExtensionSetting.key == key)).scalar_one_or_none()


@extension_bp.get('/settings')
@require_capability(EXTENSION_READ)
def list_settings(actor):
    rows = get_db().execute(select(ExtensionSetting).order_by(ExtensionSetting.key.asc())).scalars().all()
    return {'data': [setting_json(s) for s in rows]}


@extension_bp.get('/settings/<key>')
@require_capability(EXTENSION_READ)
def get_setting(key: str, actor):
    setting = _find_setting(get_db(), key)
    if setting is None:
        raise NotFound('ExtensionSetting', key)
    return setting_json(setting)


@extension_bp.put('/settings/<key>')
@require_capability(EXTENSION_WRITE)
def upsert_setting(key: str, actor):
    """Create or replace the setting stored under ``key``.

    Audited as UPDATE (with before-image) when the key existed, CREATE otherwise.
    """
    session = get_db()
    data = json_body()
    if 'value' not in data:
        abort(400, description='value required')
    setting = _find_setting(session, key)
    before = snapshot(setting)
    if setting is None:
        setting = ExtensionSetting(key=key)
        session.add(setting)
    setting.value = data['value']
    apply_fields(setting, data, EDITABLE)
    commit_or_conflict(session, 'Setting key already exists')
    action = AuditLog.ACTION_CREATE if before is None else AuditLog.ACTION_UPDATE
    record_mutation(actor, action, 'ExtensionSetting', setting.id, before=before, after=setting)
    return setting_json(setting), (201 if before is None else 200)


@extension_bp.delete('/settings/<key>')
@require_capability(EXTENSION_WRITE)
def delete_setting(key: str, actor):
    session = get_db()
    setting = _find_setting(session, key)
    if setting is None:
        raise NotFound('ExtensionSetting', key)
    before = snapshot(setting)
    session.delete(setting)
    session.commit()
    record_mutation(actor, AuditLog.ACTION_DELETE, 'ExtensionSetting', before['id'], before=before)
    return {'status': 'deleted'}


def setting_json(s: ExtensionSetting):
    return {
        'id': s.id,
        'key': s.key,
        'value': s.value,
        'description': s.description,
        'created_at': iso(s.created_at),
        'updated_at': iso(s.updated_at),
    }
