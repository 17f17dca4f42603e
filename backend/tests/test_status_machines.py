from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
import pytest
from werkzeug.exceptions import BadRequest
from couponops.errors import InvalidTransition
from couponops.services.status_machines import (
    COUPON_MACHINE, BANNER_MACHINE, CONVERSION_MACHINE, CouponEvent, ConversionEvent,
    expire_coupon, suppress_coupon, set_conversion_status,
)
from couponops.utils.fsm import StatusMachine, Transition, from_any, stamp_once

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
T1 = T0 + timedelta(days=3)


def _coupon(status='ACTIVE'):
    return SimpleNamespace(status=status)


def _conversion(status='PENDING'):
    return SimpleNamespace(status=status, confirmed_at=None, paid_at=None)


@pytest.mark.parametrize('start', ['SCHEDULED', 'ACTIVE', 'EXPIRED', 'SUPPRESSED'])
def test_expire_from_every_state(start):
    assert expire_coupon(_coupon(start)).status == 'EXPIRED'


def test_expire_is_idempotent():
    c = expire_coupon(_coupon())
    assert expire_coupon(c).status == 'EXPIRED'


def test_suppress_from_expired():
    assert suppress_coupon(_coupon('EXPIRED')).status == 'SUPPRESSED'


def test_coupon_reactivation_only_via_override():
    c = _coupon('EXPIRED')
    assert not COUPON_MACHINE.can_fire('EXPIRED', 'ACTIVATE')
    COUPON_MACHINE.override(c, 'ACTIVE')
    assert c.status == 'ACTIVE'


def test_override_rejects_unlisted_status(app_context):
    with pytest.raises(BadRequest):
        COUPON_MACHINE.override(_coupon(), 'DELETED')


def test_banner_has_no_named_transitions(app_context):
    assert BANNER_MACHINE.events == []
    b = SimpleNamespace(status='ACTIVE')
    with pytest.raises(InvalidTransition):
        BANNER_MACHINE.fire(b, 'PUBLISH')
    BANNER_MACHINE.override(b, 'SCHEDULED')
    assert b.status == 'SCHEDULED'
    with pytest.raises(BadRequest):
        BANNER_MACHINE.override(b, 'ARCHIVED')


def test_confirm_stamps_confirmed_at_once():
    c = _conversion()
    set_conversion_status(c, 'CONFIRMED', now=T0)
    assert c.status == 'CONFIRMED' and c.confirmed_at == T0
    set_conversion_status(c, 'PENDING', now=T1)
    set_conversion_status(c, 'CONFIRMED', now=T1)
    assert c.confirmed_at == T0


def test_paid_stamps_paid_at_without_confirming():
    c = _conversion()
    set_conversion_status(c, 'PAID', now=T0)
    assert c.paid_at == T0
    assert c.confirmed_at is None


def test_permissive_backward_move_keeps_timestamps():
    c = _conversion()
    set_conversion_status(c, 'CONFIRMED', now=T0)
    set_conversion_status(c, 'PAID', now=T1)
    set_conversion_status(c, 'PENDING', now=T1 + timedelta(hours=1))
    assert c.status == 'PENDING'
    assert c.confirmed_at == T0 and c.paid_at == T1


def test_reject_sets_no_timestamp():
    c = _conversion('CONFIRMED')
    set_conversion_status(c, 'REJECTED', now=T0)
    assert c.status == 'REJECTED'
    assert c.confirmed_at is None and c.paid_at is None


def test_unknown_conversion_status_is_bad_request(app_context):
    c = _conversion()
    with pytest.raises(BadRequest):
        set_conversion_status(c, 'REFUNDED')
    assert c.status == 'PENDING'


def test_conversion_events_reachable_from_every_state():
    for status in ('PENDING', 'CONFIRMED', 'REJECTED', 'PAID'):
        assert CONVERSION_MACHINE.events_from(status) == sorted(
            [ConversionEvent.MARK_PENDING, ConversionEvent.CONFIRM, ConversionEvent.REJECT, ConversionEvent.MARK_PAID])
    assert COUPON_MACHINE.events == sorted([CouponEvent.EXPIRE, CouponEvent.SUPPRESS])


def test_fire_outside_table_raises_invalid_transition():
    m = StatusMachine('Doc', ['DRAFT', 'LIVE'], {('DRAFT', 'PUBLISH'): Transition('LIVE')})
    doc = SimpleNamespace(status='LIVE')
    with pytest.raises(InvalidTransition) as exc:
        m.fire(doc, 'PUBLISH')
    assert exc.value.code == 400
    assert doc.status == 'LIVE'


def test_machine_rejects_table_with_unknown_state():
    with pytest.raises(ValueError):
        StatusMachine('Doc', ['DRAFT'], {('DRAFT', 'PUBLISH'): Transition('LIVE')})


def test_from_any_and_stamp_once_helpers():
    rows = from_any(['A', 'B'], 'GO', Transition('B', (stamp_once('done_at'),)))
    assert set(rows) == {('A', 'GO'), ('B', 'GO')}
    m = StatusMachine('X', ['A', 'B'], rows)
    x = SimpleNamespace(status='A', done_at=None)
    m.fire(x, 'GO', now=T0)
    m.fire(x, 'GO', now=T1)
    assert x.done_at == T0
