"""Pure permission-set helpers shared by the API gate and the console client.

A *role* here is anything exposing ``name`` and ``permissions`` either as
attributes (ORM ``Role``) or as mapping keys (role JSON returned by the API).
Permission entries may be objects/mappings with a ``name`` or bare strings.
Names compare in lowercase canonical form.
"""
from __future__ import annotations
from typing import Any, Iterable, Optional, Set


def normalize_name(name: Optional[str]) -> str:
    return (name or '').strip().lower()


def _field(obj: Any, key: str):
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def permission_names(role: Any) -> Set[str]:
    """Return the lowercase permission names held by ``role`` (empty set for no role)."""
    names: Set[str] = set()
    for entry in _field(role, 'permissions') or ():
        raw = entry if isinstance(entry, str) else _field(entry, 'name')
        if raw:
            names.add(normalize_name(raw))
    return names


def role_has_permission(role: Any, name: str) -> bool:
    wanted = normalize_name(name)
    if not wanted:
        return False
    return wanted in permission_names(role)


def role_has_name(role: Any, allowed: Iterable[str]) -> bool:
    role_name = normalize_name(_field(role, 'name'))
    if not role_name:
        return False
    return role_name in {normalize_name(n) for n in allowed}


__all__ = ['normalize_name', 'permission_names', 'role_has_permission', 'role_has_name']
