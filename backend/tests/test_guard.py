import logging
import pytest
from couponops.errors import Forbidden, Unauthenticated
from couponops.services.auth import Actor
from couponops.services.guard import AuthorizationGuard
from couponops.services.policy import build_default_registry


def _actor(role):
    return Actor(id='A1', email='a1@example.com', role=role, active=True)


def test_unauthenticated_wins_over_forbidden():
    guard = AuthorizationGuard(None, build_default_registry())
    with pytest.raises(Unauthenticated):
        guard.require_capability('admins:write')
    with pytest.raises(Unauthenticated):
        guard.require_authenticated()
    assert guard.has_capability('admins:write') is False


def test_forbidden_carries_capability(caplog):
    guard = AuthorizationGuard(_actor('MARKETING'), build_default_registry())
    with caplog.at_level(logging.WARNING):
        with pytest.raises(Forbidden) as exc:
            guard.require_capability('admins:write')
    assert exc.value.capability == 'admins:write'
    assert exc.value.code == 403
    assert 'admins:write' in caplog.text


def test_granted_capability_returns_actor():
    actor = _actor('FINANCE')
    guard = AuthorizationGuard(actor, build_default_registry())
    assert guard.require_capability('conversions:write') is actor
    assert guard.has_capability('conversions:write')
    assert not guard.has_capability('coupons:write')


def test_super_admin_passes_any_capability():
    guard = AuthorizationGuard(_actor('SUPER_ADMIN'), build_default_registry())
    assert guard.require_capability('something:new') is guard.actor
