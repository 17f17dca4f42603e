from __future__ import annotations
import logging
from typing import Optional
from flask import current_app, g, request
from couponops import get_db
from couponops.errors import Forbidden, Unauthenticated
from couponops.services.auth import Actor, ActorResolver, bearer_credential, verify_token
from couponops.services.policy import PermissionRegistry
from couponops.services.store import AdminStore

logger = logging.getLogger(__name__)


class AuthorizationGuard:
    """Per-request authorization decisions over an already-resolved actor."""

    def __init__(self, actor: Optional[Actor], registry: PermissionRegistry):
        self._actor = actor
        self._registry = registry

    @property
    def actor(self) -> Optional[Actor]:
        return self._actor

    def has_capability(self, capability: str) -> bool:
        return self._actor is not None and self._registry.role_has_capability(self._actor.role, capability)

    def require_authenticated(self) -> Actor:
        if self._actor is None:
            raise Unauthenticated()
        return self._actor

    def require_capability(self, capability: str) -> Actor:
        actor = self.require_authenticated()
        if not self._registry.role_has_capability(actor.role, capability):
            logger.warning('Forbidden: admin %s (%s) lacks %s', actor.id, actor.role, capability)
            raise Forbidden(capability)
        return actor


def get_registry() -> PermissionRegistry:
    return current_app.extensions['permission_registry']


def current_guard() -> AuthorizationGuard:
    """Guard for the current request, resolving the bearer credential once."""
    guard = g.get('authz_guard')
    if guard is None:
        resolver = ActorResolver(verify_token, AdminStore(get_db()).find_by_id)
        actor = resolver.resolve(bearer_credential(request.headers.get('Authorization')))
        guard = AuthorizationGuard(actor, get_registry())
        g.authz_guard = guard
    return guard


def client_ip() -> Optional[str]:
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.remote_addr


def user_agent() -> Optional[str]:
    return request.headers.get('User-Agent') or None


__all__ = ['AuthorizationGuard', 'current_guard', 'get_registry', 'client_ip', 'user_agent']
