from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import CONVERSIONS_READ, CONVERSIONS_WRITE
from couponops.decorators.auth import require_capability
from couponops.decorators.audit import audit_mutation
from couponops.models.audit import AuditLog
from couponops.models.conversion import Conversion
from couponops.services.status_machines import set_conversion_status
from couponops.services.store import get_or_404
from couponops.utils.listing import paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import json_body, validate_status, require_fields

conversions_bp = Blueprint('conversions', __name__)


@conversions_bp.get('/conversions')
@require_capability(CONVERSIONS_READ)
def list_conversions(actor):
    stmt = select(Conversion)
    status = request.args.get('status')
    merchant_id = request.args.get('merchant_id')
    if status:
        stmt = stmt.where(Conversion.status == validate_status(status, Conversion.ALL_STATUSES))
    if merchant_id:
        stmt = stmt.where(Conversion.merchant_id == merchant_id)
    return paginated_response(get_db(), stmt, [Conversion.created_at.desc(), Conversion.id], conversion_json)


@conversions_bp.get('/conversions/<conversion_id>')
@require_capability(CONVERSIONS_READ)
def get_conversion(conversion_id: str, actor):
    return conversion_json(get_or_404(get_db(), Conversion, conversion_id))


@conversions_bp.put('/conversions/<conversion_id>/status')
@require_capability(CONVERSIONS_WRITE)
@audit_mutation(AuditLog.ACTION_UPDATE, Conversion, id_arg='conversion_id')
def update_conversion_status(conversion_id: str, actor):
    session = get_db()
    conversion = get_or_404(session, Conversion, conversion_id)
    data = json_body()
    require_fields(data, 'status')
    set_conversion_status(conversion, data['status'])
    session.commit()
    return conversion_json(conversion)


def conversion_json(c: Conversion):
    return {
        'id': c.id,
        'merchant_id': c.merchant_id,
        'user_id': c.user_id,
        'coupon_id': c.coupon_id,
        'order_id': c.order_id,
        'order_amount': c.order_amount,
        'commission': c.commission,
        'currency': c.currency,
        'status': c.status,
        'source': c.source,
        'transaction_date': iso(c.transaction_date),
        'confirmed_at': iso(c.confirmed_at),
        'paid_at': iso(c.paid_at),
        'created_at': iso(c.created_at),
    }
