"""Central definitions for admin roles and capability strings.

Capabilities follow the ``resource:action`` pattern. Extend cautiously; never rename a
capability silently, clients and stored audit history refer to them by name.
"""
from __future__ import annotations
from typing import Dict, List

WILDCARD = '*'

# Admin roles (closed set; persisted on Admin.role)
SUPER_ADMIN = 'SUPER_ADMIN'
OPS = 'OPS'
MARKETING = 'MARKETING'
FINANCE = 'FINANCE'
TECH = 'TECH'
ADMIN_ROLES = (SUPER_ADMIN, OPS, MARKETING, FINANCE, TECH)

RESOURCE_ACTIONS = {
    'admins': ['read', 'write'],
    'coupons': ['read', 'write'],
    'merchants': ['read', 'write'],
    'deals': ['read', 'write'],
    'banners': ['read', 'write'],
    'users': ['read'],
    'clicks': ['read'],
    'conversions': ['read', 'write'],
    'extension': ['read', 'write'],
    'auditlog': ['read'],
}

ADMINS_READ = 'admins:read'
ADMINS_WRITE = 'admins:write'
COUPONS_READ = 'coupons:read'
COUPONS_WRITE = 'coupons:write'
MERCHANTS_READ = 'merchants:read'
MERCHANTS_WRITE = 'merchants:write'
DEALS_READ = 'deals:read'
DEALS_WRITE = 'deals:write'
BANNERS_READ = 'banners:read'
BANNERS_WRITE = 'banners:write'
USERS_READ = 'users:read'
CLICKS_READ = 'clicks:read'
CONVERSIONS_READ = 'conversions:read'
CONVERSIONS_WRITE = 'conversions:write'
EXTENSION_READ = 'extension:read'
EXTENSION_WRITE = 'extension:write'
AUDITLOG_READ = 'auditlog:read'


def build_all_capabilities() -> List[str]:
    codes: List[str] = []
    for resource, actions in RESOURCE_ACTIONS.items():
        for act in actions:
            codes.append(f"{resource}:{act}")
    return codes

ALL_CAPABILITIES = build_all_capabilities()

ROLE_PRESETS: Dict[str, List[str]] = {
    SUPER_ADMIN: [WILDCARD],
    OPS: [
        COUPONS_READ, COUPONS_WRITE,
        MERCHANTS_READ, MERCHANTS_WRITE,
        DEALS_READ, DEALS_WRITE,
        BANNERS_READ, BANNERS_WRITE,
        USERS_READ,
        CLICKS_READ,
        CONVERSIONS_READ,
        AUDITLOG_READ,
    ],
    MARKETING: [
        COUPONS_READ, COUPONS_WRITE,
        MERCHANTS_READ,
        DEALS_READ, DEALS_WRITE,
        BANNERS_READ, BANNERS_WRITE,
        CLICKS_READ,
        CONVERSIONS_READ,
    ],
    FINANCE: [
        COUPONS_READ,
        MERCHANTS_READ,
        CONVERSIONS_READ, CONVERSIONS_WRITE,
        USERS_READ,
        CLICKS_READ,
    ],
    # TECH: everything operational plus extension settings; read-only on admins
    TECH: [
        COUPONS_READ, COUPONS_WRITE,
        MERCHANTS_READ, MERCHANTS_WRITE,
        DEALS_READ, DEALS_WRITE,
        BANNERS_READ, BANNERS_WRITE,
        USERS_READ,
        CLICKS_READ,
        CONVERSIONS_READ,
        EXTENSION_READ, EXTENSION_WRITE,
        AUDITLOG_READ,
        ADMINS_READ,
    ],
}
