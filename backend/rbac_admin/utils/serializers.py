from __future__ import annotations
"""JSON projections of the RBAC entities. Password hashes are never emitted."""
from datetime import datetime
from typing import Any, Dict, Optional

from rbac_admin.models.rbac import Permission, Role, User


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if isinstance(dt, datetime) else None


def permission_json(p: Permission) -> Dict[str, Any]:
    return {
        'id': p.id,
        'name': p.name,
        'description': p.description or '',
        'created_at': _iso(p.created_at),
        'updated_at': _iso(p.updated_at),
    }


def role_json(r: Role) -> Dict[str, Any]:
    perms = sorted(r.permissions, key=lambda p: p.name)
    return {
        'id': r.id,
        'name': r.name,
        'description': r.description or '',
        'permissions': [permission_json(p) for p in perms],
        'created_at': _iso(r.created_at),
        'updated_at': _iso(r.updated_at),
    }


def user_json(u: User) -> Dict[str, Any]:
    return {
        'id': u.id,
        'name': u.name,
        'email': u.email,
        'gender': u.gender,
        'role': role_json(u.role) if u.role is not None else None,
        'created_at': _iso(u.created_at),
        'updated_at': _iso(u.updated_at),
    }


__all__ = ['permission_json', 'role_json', 'user_json']
