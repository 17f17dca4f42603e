"""Entity-store helpers shared by route handlers and the actor resolver."""
from __future__ import annotations
from typing import Optional, Type, TypeVar
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from couponops.errors import NotFound, Conflict
from couponops.models.authz import Admin

T = TypeVar('T')


def get_or_404(session: Session, model: Type[T], entity_id) -> T:
    obj = session.get(model, entity_id)
    if obj is None:
        raise NotFound(model.__name__, entity_id)
    return obj


def commit_or_conflict(session: Session, description: str = 'Unique constraint violated'):
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict(description=description)


class AdminStore:
    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, admin_id: str) -> Optional[Admin]:
        return self.session.get(Admin, admin_id)

    def find_by_email(self, email: str) -> Optional[Admin]:
        if not email:
            return None
        return self.session.execute(
            select(Admin).where(func.lower(Admin.email) == email.strip().lower())
        ).scalar_one_or_none()
