from __future__ import annotations
from flask import Blueprint, abort
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import ADMINS_READ, ADMINS_WRITE
from couponops.decorators.auth import require_capability
from couponops.decorators.audit import audit_mutation
from couponops.errors import Conflict
from couponops.models.audit import AuditLog
from couponops.models.authz import Admin
from couponops.services.store import AdminStore, get_or_404, commit_or_conflict
from couponops.utils.listing import paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import json_body, validate_status, require_fields, apply_fields

admins_bp = Blueprint('admins', __name__)

EDITABLE = {'email': str, 'first_name': str, 'last_name': str, 'role': str, 'is_active': bool}


@admins_bp.get('/admins')
@require_capability(ADMINS_READ)
def list_admins(actor):
    session = get_db()
    return paginated_response(session, select(Admin), [Admin.created_at.desc(), Admin.id], admin_json)


@admins_bp.get('/admins/<admin_id>')
@require_capability(ADMINS_READ)
def get_admin(admin_id: str, actor):
    return admin_json(get_or_404(get_db(), Admin, admin_id))


@admins_bp.post('/admins')
@require_capability(ADMINS_WRITE)
@audit_mutation(AuditLog.ACTION_CREATE, Admin)
def create_admin(actor):
    session = get_db()
    data = json_body()
    require_fields(data, 'email', 'password', 'first_name', 'last_name', 'role')
    role = validate_status(data['role'], Admin.ALL_ROLES, 'role')
    if not isinstance(data.get('is_active', True), bool):
        abort(400, description='is_active has the wrong type')
    email = data['email'].strip().lower()
    if AdminStore(session).find_by_email(email):
        raise Conflict(description='Email already exists')
    admin = Admin(email=email, first_name=data['first_name'], last_name=data['last_name'], role=role,
                  is_active=data.get('is_active', True))
    admin.set_password(data['password'])
    session.add(admin)
    commit_or_conflict(session, 'Email already exists')
    return admin_json(admin), 201


@admins_bp.put('/admins/<admin_id>')
@require_capability(ADMINS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Admin, id_arg='admin_id')
def update_admin(admin_id: str, actor):
    session = get_db()
    admin = get_or_404(session, Admin, admin_id)
    data = json_body()
    if 'role' in data:
        validate_status(data['role'], Admin.ALL_ROLES, 'role')
    if 'email' in data:
        if not isinstance(data['email'], str):
            abort(400, description='email has the wrong type')
        email = data['email'].strip().lower()
        if not email:
            abort(400, description='email cannot be empty')
        existing = AdminStore(session).find_by_email(email)
        if existing is not None and existing.id != admin.id:
            raise Conflict(description='Email already exists')
        data = {**data, 'email': email}
    apply_fields(admin, data, EDITABLE)
    commit_or_conflict(session, 'Email already exists')
    return admin_json(admin)


@admins_bp.delete('/admins/<admin_id>')
@require_capability(ADMINS_WRITE)
@audit_mutation(AuditLog.ACTION_DELETE, Admin, id_arg='admin_id')
def delete_admin(admin_id: str, actor):
    if admin_id == actor.id:
        abort(400, description='Cannot delete your own account')
    session = get_db()
    admin = get_or_404(session, Admin, admin_id)
    session.delete(admin)
    session.commit()
    return {'status': 'deleted'}


def admin_json(a: Admin):
    return {
        'id': a.id,
        'email': a.email,
        'first_name': a.first_name,
        'last_name': a.last_name,
        'role': a.role,
        'is_active': a.is_active,
        'last_login_at': iso(a.last_login_at),
        'created_at': iso(a.created_at),
        'updated_at': iso(a.updated_at),
    }
