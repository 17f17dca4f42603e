"""Error taxonomy shared by the guard, the status machines and the entity store.

Each error is a werkzeug HTTP exception so the unified handler in ``create_app`` maps
it to the standard JSON error shape without per-route translation.
"""
from __future__ import annotations
from typing import Optional
from werkzeug import exceptions as http


class Unauthenticated(http.Unauthorized):
    description = 'Authentication required'


class Forbidden(http.Forbidden):
    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(description=f'Permission denied: {capability}')


class NotFound(http.NotFound):
    def __init__(self, entity_type: str, entity_id: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(description=f'{entity_type} not found')


class Conflict(http.Conflict):
    pass


class InvalidTransition(http.BadRequest):
    def __init__(self, machine: str, current: str, event: str):
        self.machine = machine
        self.current = current
        self.event = event
        super().__init__(description=f'Invalid {machine} transition {event} from {current}')


__all__ = ['Unauthenticated', 'Forbidden', 'NotFound', 'Conflict', 'InvalidTransition']
