from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select
from couponops import get_db
from couponops.constants.permissions import AUDITLOG_READ
from couponops.decorators.auth import require_capability
from couponops.models.audit import AuditLog
from couponops.utils.listing import paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import validate_status, parse_datetime

audit_bp = Blueprint('audit', __name__)


@audit_bp.get('/logs')
@require_capability(AUDITLOG_READ)
def list_audit_logs(actor):
    stmt = select(AuditLog)
    args = request.args
    if args.get('admin_id'):
        stmt = stmt.where(AuditLog.admin_id == args['admin_id'])
    if args.get('action'):
        stmt = stmt.where(AuditLog.action == validate_status(args['action'], AuditLog.ALL_ACTIONS, 'action'))
    if args.get('entity_type'):
        stmt = stmt.where(AuditLog.entity_type == args['entity_type'])
    if args.get('entity_id'):
        stmt = stmt.where(AuditLog.entity_id == args['entity_id'])
    start = parse_datetime(args.get('start_date'), 'start_date')
    end = parse_datetime(args.get('end_date'), 'end_date')
    if start:
        stmt = stmt.where(AuditLog.created_at >= start)
    if end:
        stmt = stmt.where(AuditLog.created_at <= end)
    return paginated_response(get_db(), stmt, [AuditLog.created_at.desc(), AuditLog.id], audit_json)


def audit_json(r: AuditLog):
    return {
        'id': r.id,
        'admin_id': r.admin_id,
        'action': r.action,
        'entity_type': r.entity_type,
        'entity_id': r.entity_id,
        'before': r.before,
        'after': r.after,
        'ip_address': r.ip_address,
        'user_agent': r.user_agent,
        'created_at': iso(r.created_at),
    }
