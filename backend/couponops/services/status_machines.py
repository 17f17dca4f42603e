"""Status machines for Coupon, Banner and Conversion.

Every status write in the codebase goes through one of these machines: ``fire`` for the
named transitions below, ``override`` for full-record updates.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from couponops.models.coupon import Coupon
from couponops.models.banner import Banner
from couponops.models.conversion import Conversion
from couponops.utils.fsm import StatusMachine, Transition, from_any, stamp_once
from couponops.utils.validation import validate_status


class CouponEvent:
    EXPIRE = 'EXPIRE'
    SUPPRESS = 'SUPPRESS'


class ConversionEvent:
    MARK_PENDING = 'MARK_PENDING'
    CONFIRM = 'CONFIRM'
    REJECT = 'REJECT'
    MARK_PAID = 'MARK_PAID'


COUPON_MACHINE = StatusMachine('Coupon', Coupon.ALL_STATUSES, {
    **from_any(Coupon.ALL_STATUSES, CouponEvent.EXPIRE, Transition(Coupon.STATUS_EXPIRED)),
    **from_any(Coupon.ALL_STATUSES, CouponEvent.SUPPRESS, Transition(Coupon.STATUS_SUPPRESSED)),
})

# No named transitions; status changes only via full update (override)
BANNER_MACHINE = StatusMachine('Banner', Banner.ALL_STATUSES, {})

CONVERSION_EVENT_BY_STATUS = {
    Conversion.STATUS_PENDING: ConversionEvent.MARK_PENDING,
    Conversion.STATUS_CONFIRMED: ConversionEvent.CONFIRM,
    Conversion.STATUS_REJECTED: ConversionEvent.REJECT,
    Conversion.STATUS_PAID: ConversionEvent.MARK_PAID,
}

_CONVERSION_TRANSITIONS = {
    ConversionEvent.MARK_PENDING: Transition(Conversion.STATUS_PENDING),
    ConversionEvent.CONFIRM: Transition(Conversion.STATUS_CONFIRMED, (stamp_once('confirmed_at'),)),
    ConversionEvent.REJECT: Transition(Conversion.STATUS_REJECTED),
    ConversionEvent.MARK_PAID: Transition(Conversion.STATUS_PAID, (stamp_once('paid_at'),)),
}

# Permissive: every status may move to every other (PAID -> PENDING included)
_conversion_table = {}
for _event, _transition in _CONVERSION_TRANSITIONS.items():
    _conversion_table.update(from_any(Conversion.ALL_STATUSES, _event, _transition))
CONVERSION_MACHINE = StatusMachine('Conversion', Conversion.ALL_STATUSES, _conversion_table)


def expire_coupon(coupon: Coupon, now: Optional[datetime] = None) -> Coupon:
    return COUPON_MACHINE.fire(coupon, CouponEvent.EXPIRE, now)


def suppress_coupon(coupon: Coupon, now: Optional[datetime] = None) -> Coupon:
    return COUPON_MACHINE.fire(coupon, CouponEvent.SUPPRESS, now)


def set_conversion_status(conversion: Conversion, status: str, now: Optional[datetime] = None) -> Conversion:
    """Operator-driven status change; stamps confirmed_at / paid_at on first entry only."""
    validate_status(status, Conversion.ALL_STATUSES)
    return CONVERSION_MACHINE.fire(conversion, CONVERSION_EVENT_BY_STATUS[status], now)


__all__ = [
    'CouponEvent', 'ConversionEvent', 'COUPON_MACHINE', 'BANNER_MACHINE', 'CONVERSION_MACHINE',
    'CONVERSION_EVENT_BY_STATUS', 'expire_coupon', 'suppress_coupon', 'set_conversion_status',
]
