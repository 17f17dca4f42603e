import pytest
from couponops.constants.permissions import (
    ALL_CAPABILITIES, ROLE_PRESETS, ADMIN_ROLES, SUPER_ADMIN, OPS, MARKETING, FINANCE, TECH, WILDCARD,
    ADMINS_WRITE, ADMINS_READ, AUDITLOG_READ, COUPONS_WRITE, CONVERSIONS_WRITE, EXTENSION_WRITE,
)
from couponops.services.policy import PermissionRegistry, RegistryConfigError, build_default_registry


def test_default_registry_literal_membership():
    reg = build_default_registry()
    assert reg.role_has_capability(MARKETING, COUPONS_WRITE)
    assert not reg.role_has_capability(MARKETING, ADMINS_WRITE)
    assert reg.role_has_capability(FINANCE, CONVERSIONS_WRITE)
    assert not reg.role_has_capability(FINANCE, COUPONS_WRITE)
    assert reg.role_has_capability(OPS, AUDITLOG_READ)
    assert reg.role_has_capability(TECH, EXTENSION_WRITE)
    assert reg.role_has_capability(TECH, ADMINS_READ)
    assert not reg.role_has_capability(TECH, ADMINS_WRITE)


def test_wildcard_grants_capabilities_added_later():
    reg = build_default_registry()
    assert reg.wildcard_role == SUPER_ADMIN
    assert reg.role_has_capability(SUPER_ADMIN, 'payouts:approve')
    assert not reg.role_has_capability(OPS, 'payouts:approve')


def test_no_prefix_or_pattern_matching():
    reg = PermissionRegistry({**ROLE_PRESETS, OPS: ['coupons:read']})
    assert not reg.role_has_capability(OPS, 'coupons')
    assert not reg.role_has_capability(OPS, 'coupons:*')
    assert not reg.role_has_capability(OPS, 'coupons:read:all')


def test_registry_covers_every_role():
    reg = build_default_registry()
    assert set(reg.roles) == set(ADMIN_ROLES)
    for role in ADMIN_ROLES:
        assert isinstance(reg.capabilities_for(role), frozenset)


def test_missing_role_fails_at_construction():
    table = {k: v for k, v in ROLE_PRESETS.items() if k != FINANCE}
    with pytest.raises(RegistryConfigError):
        PermissionRegistry(table)


def test_unknown_role_in_table_fails():
    with pytest.raises(RegistryConfigError):
        PermissionRegistry({**ROLE_PRESETS, 'INTERN': ['coupons:read']})


def test_two_wildcard_roles_fail():
    with pytest.raises(RegistryConfigError):
        PermissionRegistry({**ROLE_PRESETS, OPS: [WILDCARD]})


def test_no_wildcard_role_fails():
    with pytest.raises(RegistryConfigError):
        PermissionRegistry({**ROLE_PRESETS, SUPER_ADMIN: ['admins:read']})


def test_wildcard_role_with_explicit_entries_fails():
    with pytest.raises(RegistryConfigError):
        PermissionRegistry({**ROLE_PRESETS, SUPER_ADMIN: [WILDCARD, 'admins:read']})


def test_misspelled_capability_fails_at_construction():
    with pytest.raises(RegistryConfigError, match='coupon:write'):
        PermissionRegistry({**ROLE_PRESETS, MARKETING: ['coupon:write', COUPONS_WRITE]})


def test_extra_capabilities_can_be_declared():
    table = {**ROLE_PRESETS, OPS: ['payouts:approve']}
    reg = PermissionRegistry(table, capabilities=list(ALL_CAPABILITIES) + ['payouts:approve'])
    assert reg.role_has_capability(OPS, 'payouts:approve')


def test_presets_only_use_known_capabilities():
    for role, caps in ROLE_PRESETS.items():
        assert set(caps) - {WILDCARD} <= set(ALL_CAPABILITIES), role


def test_unknown_role_lookup_raises():
    reg = build_default_registry()
    with pytest.raises(KeyError):
        reg.role_has_capability('INTERN', 'coupons:read')


def test_registry_is_immutable_after_build():
    source = {k: list(v) for k, v in ROLE_PRESETS.items()}
    reg = PermissionRegistry(source)
    source[MARKETING].append(ADMINS_WRITE)
    assert not reg.role_has_capability(MARKETING, ADMINS_WRITE)
    with pytest.raises(TypeError):
        reg._table[MARKETING] = frozenset({ADMINS_WRITE})


def test_app_uses_configured_table():
    from couponops import create_app
    custom = {**ROLE_PRESETS, MARKETING: [COUPONS_WRITE, ADMINS_WRITE]}
    app = create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'ROLE_CAPABILITIES': custom})
    assert app.extensions['permission_registry'].role_has_capability(MARKETING, ADMINS_WRITE)


def test_app_refuses_to_start_with_bad_table():
    from couponops import create_app
    with pytest.raises(RegistryConfigError):
        create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'ROLE_CAPABILITIES': {SUPER_ADMIN: [WILDCARD]}})
