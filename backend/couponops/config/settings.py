"""Environment-driven defaults for create_app().

Values come from the process environment (a local ``.env`` is loaded by python-dotenv
when the package is imported). Callers such as tests overlay their own mapping on top.
"""
from __future__ import annotations
import os
from datetime import timedelta
from typing import Any, Dict

DEFAULT_TOKEN_TTL_SECONDS = 7 * 24 * 3600


def load_settings() -> Dict[str, Any]:
    ttl = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', DEFAULT_TOKEN_TTL_SECONDS))
    return {
        'JWT_SECRET_KEY': os.getenv('JWT_SECRET_KEY', 'dev-secret'),
        'JWT_ACCESS_TOKEN_EXPIRES': timedelta(seconds=ttl),
        'DATABASE_URL': os.getenv('DATABASE_URL', 'sqlite:///dev.db'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO').upper(),
        'SEED_ADMIN_EMAIL': os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com'),
        'SEED_ADMIN_PASSWORD': os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'),
    }
