from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import BANNERS_READ, BANNERS_WRITE
from couponops.decorators.auth import require_capability
from couponops.decorators.audit import audit_mutation
from couponops.models.audit import AuditLog
from couponops.models.banner import Banner
from couponops.services.status_machines import BANNER_MACHINE
from couponops.services.store import get_or_404
from couponops.utils.listing import paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import json_body, optional, validate_status, require_fields, apply_fields

banners_bp = Blueprint('banners', __name__)

EDITABLE = {
    'title': str, 'description': optional(str), 'image_url': str, 'link_url': optional(str),
    'platform': optional(str), 'sort_order': int, 'start_date': optional(str), 'end_date': optional(str),
}
DATETIME_FIELDS = ['start_date', 'end_date']


@banners_bp.get('/banners')
@require_capability(BANNERS_READ)
def list_banners(actor):
    stmt = select(Banner)
    status = request.args.get('status')
    if status:
        stmt = stmt.where(Banner.status == validate_status(status, Banner.ALL_STATUSES))
    return paginated_response(get_db(), stmt, [Banner.sort_order.asc(), Banner.created_at.desc(), Banner.id], banner_json)


@banners_bp.post('/banners')
@require_capability(BANNERS_WRITE)
@audit_mutation(AuditLog.ACTION_CREATE, Banner)
def create_banner(actor):
    session = get_db()
    data = json_body()
    require_fields(data, 'title', 'image_url')
    banner = Banner()
    apply_fields(banner, data, EDITABLE, DATETIME_FIELDS)
    BANNER_MACHINE.override(banner, data.get('status') or Banner.STATUS_ACTIVE)
    session.add(banner)
    session.commit()
    return banner_json(banner), 201


@banners_bp.put('/banners/<banner_id>')
@require_capability(BANNERS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Banner, id_arg='banner_id')
def update_banner(banner_id: str, actor):
    session = get_db()
    banner = get_or_404(session, Banner, banner_id)
    data = json_body()
    apply_fields(banner, data, EDITABLE, DATETIME_FIELDS)
    if 'status' in data:
        BANNER_MACHINE.override(banner, data['status'])
    session.commit()
    return banner_json(banner)


@banners_bp.delete('/banners/<banner_id>')
@require_capability(BANNERS_WRITE)
@audit_mutation(AuditLog.ACTION_DELETE, Banner, id_arg='banner_id')
def delete_banner(banner_id: str, actor):
    session = get_db()
    session.delete(get_or_404(session, Banner, banner_id))
    session.commit()
    return {'status': 'deleted'}


def banner_json(b: Banner):
    return {
        'id': b.id,
        'title': b.title,
        'description': b.description,
        'image_url': b.image_url,
        'link_url': b.link_url,
        'status': b.status,
        'platform': b.platform,
        'sort_order': b.sort_order,
        'start_date': iso(b.start_date),
        'end_date': iso(b.end_date),
        'updated_at': iso(b.updated_at),
    }
