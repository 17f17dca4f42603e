from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import DEALS_READ, DEALS_WRITE
from couponops.decorators.auth import require_capability
from couponops.decorators.audit import audit_mutation
from couponops.models.audit import AuditLog
from couponops.models.deal import Deal
from couponops.models.merchant import Merchant
from couponops.services.store import get_or_404
from couponops.utils.listing import paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import json_body, optional, require_fields, apply_fields

deals_bp = Blueprint('deals', __name__)

EDITABLE = {
    'merchant_id': str, 'title': str, 'description': optional(str), 'image_url': optional(str),
    'link_url': optional(str), 'discount_text': optional(str), 'is_featured': bool, 'is_active': bool,
    'sort_order': int, 'start_date': optional(str), 'end_date': optional(str),
}
DATETIME_FIELDS = ['start_date', 'end_date']


@deals_bp.get('/deals')
@require_capability(DEALS_READ)
def list_deals(actor):
    stmt = select(Deal)
    merchant_id = request.args.get('merchant_id')
    if merchant_id:
        stmt = stmt.where(Deal.merchant_id == merchant_id)
    return paginated_response(get_db(), stmt, [Deal.sort_order.asc(), Deal.created_at.desc(), Deal.id], deal_json)


@deals_bp.post('/deals')
@require_capability(DEALS_WRITE)
@audit_mutation(AuditLog.ACTION_CREATE, Deal)
def create_deal(actor):
    session = get_db()
    data = json_body()
    require_fields(data, 'merchant_id', 'title')
    get_or_404(session, Merchant, data['merchant_id'])
    deal = Deal()
    apply_fields(deal, data, EDITABLE, DATETIME_FIELDS)
    session.add(deal)
    session.commit()
    return deal_json(deal), 201


@deals_bp.put('/deals/<deal_id>')
@require_capability(DEALS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Deal, id_arg='deal_id')
def update_deal(deal_id: str, actor):
    session = get_db()
    deal = get_or_404(session, Deal, deal_id)
    data = json_body()
    apply_fields(deal, data, EDITABLE, DATETIME_FIELDS)
    if 'merchant_id' in data:
        get_or_404(session, Merchant, deal.merchant_id)
    session.commit()
    return deal_json(deal)


@deals_bp.delete('/deals/<deal_id>')
@require_capability(DEALS_WRITE)
@audit_mutation(AuditLog.ACTION_DELETE, Deal, id_arg='deal_id')
def delete_deal(deal_id: str, actor):
    session = get_db()
    session.delete(get_or_404(session, Deal, deal_id))
    session.commit()
    return {'status': 'deleted'}


def deal_json(d: Deal):
    return {
        'id': d.id,
        'merchant_id': d.merchant_id,
        'title': d.title,
        'description': d.description,
        'image_url': d.image_url,
        'link_url': d.link_url,
        'discount_text': d.discount_text,
        'is_featured': d.is_featured,
        'is_active': d.is_active,
        'sort_order': d.sort_order,
        'start_date': iso(d.start_date),
        'end_date': iso(d.end_date),
        'updated_at': iso(d.updated_at),
    }
