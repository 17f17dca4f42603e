from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import MERCHANTS_READ, MERCHANTS_WRITE
from couponops.decorators.auth import require_capability
from couponops.decorators.audit import audit_mutation
from couponops.models.audit import AuditLog
from couponops.models.merchant import Merchant
from couponops.services.store import get_or_404, commit_or_conflict
from couponops.utils.listing import paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import json_body, optional, require_fields, apply_fields

merchants_bp = Blueprint('merchants', __name__)

EDITABLE = {
    'name': str, 'slug': str, 'description': optional(str), 'website_url': str,
    'logo_url': optional(str), 'affiliate_url': optional(str), 'priority': int,
    'is_featured': bool, 'is_active': bool,
}


@merchants_bp.get('/merchants')
@require_capability(MERCHANTS_READ)
def list_merchants(actor):
    stmt = select(Merchant)
    search = request.args.get('search')
    if search:
        stmt = stmt.where(Merchant.name.ilike(f'%{search}%') | Merchant.slug.ilike(f'%{search}%'))
    if request.args.get('is_featured') is not None:
        stmt = stmt.where(Merchant.is_featured == (request.args['is_featured'].lower() == 'true'))
    return paginated_response(get_db(), stmt, [Merchant.priority.desc(), Merchant.name.asc()], merchant_json)


@merchants_bp.get('/merchants/<merchant_id>')
@require_capability(MERCHANTS_READ)
def get_merchant(merchant_id: str, actor):
    return merchant_json(get_or_404(get_db(), Merchant, merchant_id))


@merchants_bp.post('/merchants')
@require_capability(MERCHANTS_WRITE)
@audit_mutation(AuditLog.ACTION_CREATE, Merchant)
def create_merchant(actor):
    session = get_db()
    data = json_body()
    require_fields(data, 'name', 'slug', 'website_url')
    merchant = Merchant()
    apply_fields(merchant, data, EDITABLE)
    session.add(merchant)
    commit_or_conflict(session, 'Slug already exists')
    return merchant_json(merchant), 201


@merchants_bp.put('/merchants/<merchant_id>')
@require_capability(MERCHANTS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Merchant, id_arg='merchant_id')
def update_merchant(merchant_id: str, actor):
    session = get_db()
    merchant = get_or_404(session, Merchant, merchant_id)
    apply_fields(merchant, json_body(), EDITABLE)
    commit_or_conflict(session, 'Slug already exists')
    return merchant_json(merchant)


@merchants_bp.delete('/merchants/<merchant_id>')
@require_capability(MERCHANTS_WRITE)
@audit_mutation(AuditLog.ACTION_DELETE, Merchant, id_arg='merchant_id')
def delete_merchant(merchant_id: str, actor):
    session = get_db()
    merchant = get_or_404(session, Merchant, merchant_id)
    session.delete(merchant)
    session.commit()
    return {'status': 'deleted'}


@merchants_bp.post('/merchants/<merchant_id>/toggle-featured')
@require_capability(MERCHANTS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Merchant, id_arg='merchant_id')
def toggle_featured(merchant_id: str, actor):
    session = get_db()
    merchant = get_or_404(session, Merchant, merchant_id)
    merchant.is_featured = not merchant.is_featured
    session.commit()
    return merchant_json(merchant)


def merchant_json(m: Merchant):
    return {
        'id': m.id,
        'name': m.name,
        'slug': m.slug,
        'description': m.description,
        'website_url': m.website_url,
        'logo_url': m.logo_url,
        'affiliate_url': m.affiliate_url,
        'priority': m.priority,
        'is_featured': m.is_featured,
        'is_active': m.is_active,
        'created_at': iso(m.created_at),
        'updated_at': iso(m.updated_at),
    }
