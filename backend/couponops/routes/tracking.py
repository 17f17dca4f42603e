from __future__ import annotations
"""Read-only views over shopper accounts and click telemetry.

Both tables are written by the tracking pipeline; admins can review them but no
route here mutates anything, so nothing is audited.
"""
from typing import Dict, Iterable
from flask import Blueprint, request
from sqlalchemy import func, or_, select
from couponops import get_db
from couponops.constants.permissions import CLICKS_READ, USERS_READ
from couponops.decorators.auth import require_capability
from couponops.models.click import Click
from couponops.models.conversion import Conversion
from couponops.models.user import User
from couponops.services.store import get_or_404
from couponops.utils.listing import build_list_payload, pagination_args, paginated_response
from couponops.utils.serialization import iso
from couponops.utils.validation import parse_datetime

tracking_bp = Blueprint('tracking', __name__)


def _counts_by_user(session, model, user_ids: Iterable[str]) -> Dict[str, int]:
    ids = list(user_ids)
    if not ids:
        return {}
    stmt = select(model.user_id, func.count()).where(model.user_id.in_(ids)).group_by(model.user_id)
    return dict(session.execute(stmt).all())


@tracking_bp.get('/users')
@require_capability(USERS_READ)
def list_users(actor):
    session = get_db()
    stmt = select(User)
    search = request.args.get('search')
    if search:
        pattern = f'%{search}%'
        stmt = stmt.where(or_(User.email.ilike(pattern), User.first_name.ilike(pattern), User.last_name.ilike(pattern)))
    limit, offset = pagination_args()
    total = session.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    users = session.execute(stmt.order_by(User.created_at.desc(), User.id).offset(offset).limit(limit)).scalars().all()
    ids = [u.id for u in users]
    clicks = _counts_by_user(session, Click, ids)
    conversions = _counts_by_user(session, Conversion, ids)
    rows = [user_json(u, clicks.get(u.id, 0), conversions.get(u.id, 0)) for u in users]
    return build_list_payload(rows, total, limit, offset)


@tracking_bp.get('/users/<user_id>')
@require_capability(USERS_READ)
def get_user(user_id: str, actor):
    session = get_db()
    user = get_or_404(session, User, user_id)
    clicks = _counts_by_user(session, Click, [user.id]).get(user.id, 0)
    conversions = _counts_by_user(session, Conversion, [user.id]).get(user.id, 0)
    return user_json(user, clicks, conversions)


@tracking_bp.get('/clicks')
@require_capability(CLICKS_READ)
def list_clicks(actor):
    stmt = select(Click)
    args = request.args
    for name in ('merchant_id', 'coupon_id', 'user_id'):
        if args.get(name):
            stmt = stmt.where(getattr(Click, name) == args[name])
    start = parse_datetime(args.get('start_date'), 'start_date')
    end = parse_datetime(args.get('end_date'), 'end_date')
    if start:
        stmt = stmt.where(Click.created_at >= start)
    if end:
        stmt = stmt.where(Click.created_at <= end)
    return paginated_response(get_db(), stmt, [Click.created_at.desc(), Click.id], click_json)


def user_json(u: User, clicks_count: int, conversions_count: int):
    return {
        'id': u.id,
        'email': u.email,
        'phone': u.phone,
        'first_name': u.first_name,
        'last_name': u.last_name,
        'country': u.country,
        'platform': u.platform,
        'is_active': u.is_active,
        'clicks_count': clicks_count,
        'conversions_count': conversions_count,
        'created_at': iso(u.created_at),
        'updated_at': iso(u.updated_at),
    }


def click_json(c: Click):
    return {
        'id': c.id,
        'user_id': c.user_id,
        'merchant_id': c.merchant_id,
        'coupon_id': c.coupon_id,
        'source': c.source,
        'platform': c.platform,
        'device_info': c.device_info,
        'ip_address': c.ip_address,
        'user_agent': c.user_agent,
        'referrer': c.referrer,
        'created_at': iso(c.created_at),
    }
