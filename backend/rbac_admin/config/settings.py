from __future__ import annotations
"""Environment driven defaults for the Flask config.

Values are read at call time so tests (or a freshly loaded .env) can change
the environment before create_app() runs.
"""
import os
from datetime import timedelta
from typing import Any, Dict


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f'{name} must be an integer, got {raw!r}')


def build_config() -> Dict[str, Any]:
    return {
        'JWT_SECRET_KEY': os.getenv('JWT_SECRET_KEY', 'dev-secret-change-me-0123456789abcdef'),
        'JWT_ACCESS_TOKEN_EXPIRES': timedelta(hours=_int_env('JWT_ACCESS_TOKEN_HOURS', 24)),
        'DATABASE_URL': os.getenv('DATABASE_URL', 'sqlite:///dev.db'),
        'API_PREFIX': os.getenv('API_PREFIX', '/api/v1'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO').upper(),
        'PORT': _int_env('PORT', 5001),
        # Third-party order export integration
        'EXPORT_API_BASE_URL': os.getenv('EXPORT_API_BASE_URL', ''),
        'EXPORT_CLIENT_ID': os.getenv('EXPORT_CLIENT_ID', ''),
        'EXPORT_CLIENT_SECRET': os.getenv('EXPORT_CLIENT_SECRET', ''),
        'EXPORT_TIMEOUT_SECONDS': _int_env('EXPORT_TIMEOUT_SECONDS', 10),
    }


__all__ = ['build_config']
