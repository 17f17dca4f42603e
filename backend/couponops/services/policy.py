from __future__ import annotations
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional
from couponops.constants.permissions import ADMIN_ROLES, ALL_CAPABILITIES, ROLE_PRESETS, WILDCARD


class RegistryConfigError(ValueError):
    pass


class PermissionRegistry:
    """Immutable role -> capability table.

    Built once at process start and handed to every AuthorizationGuard. The table must
    cover every role in ``roles`` and exactly one role may hold the wildcard, which
    grants every capability including ones added after the table was written.
    Every explicit entry must name a known capability; a typo fails at construction.
    """

    def __init__(
        self,
        table: Mapping[str, Iterable[str]],
        roles: Iterable[str] = ADMIN_ROLES,
        capabilities: Iterable[str] = ALL_CAPABILITIES,
    ):
        roles = tuple(roles)
        known = frozenset(capabilities)
        missing = [r for r in roles if r not in table]
        if missing:
            raise RegistryConfigError(f'Roles without capability entry: {sorted(missing)}')
        unknown = [r for r in table if r not in roles]
        if unknown:
            raise RegistryConfigError(f'Capability entries for unknown roles: {sorted(unknown)}')
        frozen = {role: frozenset(table[role]) for role in roles}
        wildcard_roles = [role for role, caps in frozen.items() if WILDCARD in caps]
        if len(wildcard_roles) != 1:
            raise RegistryConfigError(f'Exactly one role must hold {WILDCARD!r}, found {sorted(wildcard_roles)}')
        if len(frozen[wildcard_roles[0]]) != 1:
            raise RegistryConfigError(f'Wildcard role {wildcard_roles[0]} must not list explicit capabilities')
        undefined = sorted({cap for caps in frozen.values() for cap in caps if cap != WILDCARD and cap not in known})
        if undefined:
            raise RegistryConfigError(f'Unknown capabilities in table: {undefined}')
        self._table = MappingProxyType(frozen)
        self._wildcard_role = wildcard_roles[0]

    @property
    def roles(self):
        return tuple(self._table.keys())

    @property
    def wildcard_role(self) -> str:
        return self._wildcard_role

    def as_dict(self):
        return {role: sorted(caps) for role, caps in self._table.items()}

    def capabilities_for(self, role: str) -> FrozenSet[str]:
        # unknown role: KeyError, never a silent grant
        return self._table[role]

    def role_has_capability(self, role: str, capability: str) -> bool:
        caps = self.capabilities_for(role)
        return WILDCARD in caps or capability in caps


def build_default_registry(table: Optional[Mapping[str, Iterable[str]]] = None) -> PermissionRegistry:
    return PermissionRegistry(table if table is not None else ROLE_PRESETS)


__all__ = ['PermissionRegistry', 'RegistryConfigError', 'build_default_registry']
