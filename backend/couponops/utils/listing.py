from __future__ import annotations
from typing import Callable, Tuple
from flask import request, abort
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from couponops.config.pagination import normalize_pagination


def pagination_args() -> Tuple[int, int]:
    try:
        return normalize_pagination(request.args.get('limit'), request.args.get('offset'), request.args.get('page'))
    except ValueError as e:
        abort(400, description=str(e))


def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows),
            'has_next': offset + len(rows) < total,
            'has_previous': offset > 0,
        }
    }


def paginated_response(session: Session, stmt, order_by, to_json: Callable):
    """Count + page a select() statement and render it with to_json."""
    limit, offset = pagination_args()
    total = session.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = session.execute(stmt.order_by(*order_by).offset(offset).limit(limit)).scalars().all()
    return build_list_payload([to_json(r) for r in rows], total, limit, offset)
