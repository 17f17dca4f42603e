from __future__ import annotations
import logging
from flask import Blueprint, abort
from couponops import get_db
from couponops.decorators.audit import record_mutation
from couponops.decorators.auth import require_authenticated
from couponops.models.audit import AuditLog
from couponops.models.authz import Admin
from couponops.routes.admins import admin_json
from couponops.services.audit import snapshot
from couponops.services.auth import authenticate, issue_token
from couponops.services.guard import client_ip
from couponops.services.store import AdminStore, get_or_404
from couponops.utils.validation import json_body, require_fields

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


@auth_bp.post('/login')
def login():
    data = json_body()
    require_fields(data, 'email', 'password')
    email = data['email']; password = data['password']
    session = get_db()
    admin = authenticate(AdminStore(session), email, password)
    if admin is None:
        logger.info('Failed login for %s from %s', email.strip().lower(), client_ip())
        abort(401, description='Invalid email or password')
    session.commit()
    return {'token': issue_token(admin), 'admin': admin_json(admin)}


@auth_bp.get('/me')
@require_authenticated()
def me(actor):
    return admin_json(get_or_404(get_db(), Admin, actor.id))


@auth_bp.post('/change-password')
@require_authenticated()
def change_password(actor):
    data = json_body()
    require_fields(data, 'current_password', 'new_password')
    session = get_db()
    admin = get_or_404(session, Admin, actor.id)
    if not admin.verify_password(data['current_password']):
        abort(400, description='Current password is incorrect')
    before = snapshot(admin)
    admin.set_password(data['new_password'])
    session.commit()
    record_mutation(actor, AuditLog.ACTION_UPDATE, 'Admin', admin.id, before=before, after=admin)
    return {'status': 'ok'}
