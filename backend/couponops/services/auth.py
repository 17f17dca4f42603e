"""Credential issue/verification and actor resolution.

Every way a credential can fail (bad signature, malformed, expired, unknown actor,
inactive actor) resolves to ``None``; callers never learn which one it was.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from couponops.models.authz import Admin, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPayload:
    actor_id: str
    issued_role: Optional[str] = None


@dataclass(frozen=True)
class Actor:
    id: str
    email: str
    role: str
    active: bool
    last_authenticated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, admin: Admin) -> 'Actor':
        return cls(
            id=admin.id,
            email=admin.email,
            role=admin.role,
            active=bool(admin.is_active),
            last_authenticated_at=admin.last_login_at,
        )


def issue_token(admin: Admin, **kwargs) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    claims = {'email': admin.email, 'role': admin.role}
    return create_access_token(identity=str(admin.id), additional_claims=claims, **kwargs)


def verify_token(token: str) -> Optional[TokenPayload]:
    """Signature/expiry check only; requires an app context for the signing secret."""
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException):
        return None
    subject = claims.get('sub')
    if not subject or claims.get('type', 'access') != 'access':
        return None
    return TokenPayload(actor_id=str(subject), issued_role=claims.get('role'))


def bearer_credential(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


class ActorResolver:
    """Turns a bearer credential into an Actor, performing at most one store lookup."""

    def __init__(self, verify: Callable[[str], Optional[TokenPayload]], find_actor: Callable[[str], Optional[Admin]]):
        self.verify = verify
        self.find_actor = find_actor

    def resolve(self, credential: Optional[str]) -> Optional[Actor]:
        if not credential:
            return None
        try:
            payload = self.verify(credential)
        except Exception:
            logger.debug('credential verification raised', exc_info=True)
            return None
        if payload is None:
            return None
        try:
            record = self.find_actor(payload.actor_id)
        except Exception:
            logger.debug('actor lookup raised for %s', payload.actor_id, exc_info=True)
            return None
        if record is None or not record.is_active:
            return None
        return Actor.from_record(record)


def authenticate(store, email: str, password: str) -> Optional[Admin]:
    """Login path: returns the admin on a valid, active account and stamps last_login_at."""
    admin = store.find_by_email(email)
    if admin is None or not admin.is_active or not admin.verify_password(password):
        return None
    admin.last_login_at = utcnow()
    return admin


__all__ = [
    'TokenPayload', 'Actor', 'issue_token', 'verify_token', 'bearer_credential',
    'ActorResolver', 'authenticate',
]
