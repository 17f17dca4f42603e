from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import COUPONS_READ, COUPONS_WRITE
from couponops.decorators.auth import require_capability
from couponops.decorators.audit import audit_mutation
from couponops.models.audit import AuditLog
from couponops.models.coupon import Coupon
from couponops.models.merchant import Merchant
from couponops.services.status_machines import COUPON_MACHINE, expire_coupon, suppress_coupon
from couponops.services.store import get_or_404, commit_or_conflict
from couponops.utils.listing import paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import NUMBER, json_body, optional, validate_status, require_fields, apply_fields

coupons_bp = Blueprint('coupons', __name__)

EDITABLE = {
    'merchant_id': str, 'code': str, 'title': str, 'description': optional(str), 'type': str,
    'discount_value': optional(*NUMBER), 'is_pinned': bool, 'is_exclusive': bool, 'is_verified': bool,
    'start_date': optional(str), 'end_date': optional(str),
}
DATETIME_FIELDS = ['start_date', 'end_date']


@coupons_bp.get('/coupons')
@require_capability(COUPONS_READ)
def list_coupons(actor):
    stmt = select(Coupon)
    search = request.args.get('search')
    merchant_id = request.args.get('merchant_id')
    status = request.args.get('status')
    pinned = request.args.get('is_pinned')
    if search:
        stmt = stmt.where(Coupon.code.ilike(f'%{search}%') | Coupon.title.ilike(f'%{search}%'))
    if merchant_id:
        stmt = stmt.where(Coupon.merchant_id == merchant_id)
    if status:
        stmt = stmt.where(Coupon.status == validate_status(status, Coupon.ALL_STATUSES))
    if pinned is not None:
        stmt = stmt.where(Coupon.is_pinned == (pinned.lower() == 'true'))
    return paginated_response(get_db(), stmt, [Coupon.is_pinned.desc(), Coupon.created_at.desc(), Coupon.id], coupon_json)


@coupons_bp.get('/coupons/<coupon_id>')
@require_capability(COUPONS_READ)
def get_coupon(coupon_id: str, actor):
    return coupon_json(get_or_404(get_db(), Coupon, coupon_id))


@coupons_bp.post('/coupons')
@require_capability(COUPONS_WRITE)
@audit_mutation(AuditLog.ACTION_CREATE, Coupon)
def create_coupon(actor):
    session = get_db()
    data = json_body()
    require_fields(data, 'merchant_id', 'code', 'title')
    get_or_404(session, Merchant, data['merchant_id'])
    if 'type' in data:
        validate_status(data['type'], Coupon.ALL_TYPES, 'type')
    coupon = Coupon(created_by_id=actor.id)
    apply_fields(coupon, data, EDITABLE, DATETIME_FIELDS)
    COUPON_MACHINE.override(coupon, data.get('status') or Coupon.STATUS_ACTIVE)
    session.add(coupon)
    commit_or_conflict(session)
    return coupon_json(coupon), 201


@coupons_bp.put('/coupons/<coupon_id>')
@require_capability(COUPONS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Coupon, id_arg='coupon_id')
def update_coupon(coupon_id: str, actor):
    session = get_db()
    coupon = get_or_404(session, Coupon, coupon_id)
    data = json_body()
    if 'type' in data:
        validate_status(data['type'], Coupon.ALL_TYPES, 'type')
    apply_fields(coupon, data, EDITABLE, DATETIME_FIELDS)
    if 'merchant_id' in data:
        get_or_404(session, Merchant, coupon.merchant_id)
    if 'status' in data:
        # full-update escape hatch: any listed status, no edge check (e.g. EXPIRED -> ACTIVE)
        COUPON_MACHINE.override(coupon, data['status'])
    coupon.updated_by_id = actor.id
    commit_or_conflict(session)
    return coupon_json(coupon)


@coupons_bp.delete('/coupons/<coupon_id>')
@require_capability(COUPONS_WRITE)
@audit_mutation(AuditLog.ACTION_DELETE, Coupon, id_arg='coupon_id')
def delete_coupon(coupon_id: str, actor):
    session = get_db()
    coupon = get_or_404(session, Coupon, coupon_id)
    session.delete(coupon)
    session.commit()
    return {'status': 'deleted'}


@coupons_bp.post('/coupons/<coupon_id>/toggle-pinned')
@require_capability(COUPONS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Coupon, id_arg='coupon_id')
def toggle_pinned(coupon_id: str, actor):
    session = get_db()
    coupon = get_or_404(session, Coupon, coupon_id)
    coupon.is_pinned = not coupon.is_pinned
    coupon.updated_by_id = actor.id
    session.commit()
    return coupon_json(coupon)


@coupons_bp.post('/coupons/<coupon_id>/expire')
@require_capability(COUPONS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Coupon, id_arg='coupon_id')
def expire(coupon_id: str, actor):
    session = get_db()
    coupon = get_or_404(session, Coupon, coupon_id)
    expire_coupon(coupon)
    coupon.updated_by_id = actor.id
    session.commit()
    return coupon_json(coupon)


@coupons_bp.post('/coupons/<coupon_id>/suppress')
@require_capability(COUPONS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Coupon, id_arg='coupon_id')
def suppress(coupon_id: str, actor):
    session = get_db()
    coupon = get_or_404(session, Coupon, coupon_id)
    suppress_coupon(coupon)
    coupon.updated_by_id = actor.id
    session.commit()
    return coupon_json(coupon)


def coupon_json(c: Coupon):
    return {
        'id': c.id,
        'merchant_id': c.merchant_id,
        'code': c.code,
        'title': c.title,
        'description': c.description,
        'type': c.type,
        'discount_value': c.discount_value,
        'status': c.status,
        'is_pinned': c.is_pinned,
        'is_exclusive': c.is_exclusive,
        'is_verified': c.is_verified,
        'usage_count': c.usage_count,
        'start_date': iso(c.start_date),
        'end_date': iso(c.end_date),
        'created_by_id': c.created_by_id,
        'updated_by_id': c.updated_by_id,
        'created_at': iso(c.created_at),
        'updated_at': iso(c.updated_at),
    }
