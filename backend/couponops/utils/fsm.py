from __future__ import annotations
"""Table-driven status machine for status-bearing entities (Coupon, Banner, Conversion).

A machine is a table of ``(from_status, event) -> Transition(target, side_effects)``.
Usage:
    from couponops.utils.fsm import StatusMachine, Transition, from_any
    COUPON = StatusMachine('Coupon', Coupon.ALL_STATUSES, {
        **from_any(Coupon.ALL_STATUSES, 'EXPIRE', Transition(Coupon.STATUS_EXPIRED)),
    })
    COUPON.fire(coupon, 'EXPIRE')

``fire`` is the only way a status moves along the table. ``override`` is the explicit
escape hatch used by full-record updates; it validates membership but checks no edge.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Tuple
from couponops.errors import InvalidTransition
from couponops.models.authz import utcnow
from couponops.utils.validation import validate_status

SideEffect = Callable[[Any, datetime], None]


@dataclass(frozen=True)
class Transition:
    target: str
    side_effects: Tuple[SideEffect, ...] = ()


def from_any(states: Iterable[str], event: str, transition: Transition) -> Dict[Tuple[str, str], Transition]:
    """Spell out "any state -> target" as one explicit row per from-state."""
    return {(state, event): transition for state in states}


def stamp_once(field: str) -> SideEffect:
    """Side effect setting a timestamp field only if it is still empty."""
    def _stamp(entity, now: datetime):
        if getattr(entity, field) is None:
            setattr(entity, field, now)
    _stamp.__name__ = f'stamp_once_{field}'
    return _stamp


class StatusMachine:
    def __init__(self, name: str, states: Iterable[str], table: Dict[Tuple[str, str], Transition], field_name: str = 'status'):
        self.name = name
        self.states = tuple(states)
        self.field_name = field_name
        for (source, event), transition in table.items():
            if source not in self.states or transition.target not in self.states:
                raise ValueError(f'{name}: transition {source} --{event}--> {transition.target} uses unknown state')
        self.table = dict(table)

    @property
    def events(self):
        return sorted({event for (_, event) in self.table})

    def events_from(self, status: str):
        return sorted(event for (source, event) in self.table if source == status)

    def can_fire(self, status: str, event: str) -> bool:
        return (status, event) in self.table

    def fire(self, entity, event: str, now: Optional[datetime] = None):
        current = getattr(entity, self.field_name)
        transition = self.table.get((current, event))
        if transition is None:
            raise InvalidTransition(self.name, current, event)
        if now is None:
            now = utcnow()
        setattr(entity, self.field_name, transition.target)
        for effect in transition.side_effects:
            effect(entity, now)
        return entity

    def override(self, entity, status: str):
        setattr(entity, self.field_name, validate_status(status, self.states, self.field_name))
        return entity

__all__ = ['StatusMachine', 'Transition', 'from_any', 'stamp_once']
