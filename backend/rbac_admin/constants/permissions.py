"""Central definitions for built-in permission and role names.
Extend cautiously; names are persisted and checked by both the API gate and the console client.
"""
from __future__ import annotations
from typing import Dict, List

NAME_PATTERN = r'^[a-z0-9_]+$'

GENDERS = ('male', 'female', 'other')

ADMIN_ROLE = 'admin'
STAFF_ROLE = 'staff'
USER_ROLE = 'user'
BUILTIN_ROLES = (ADMIN_ROLE, STAFF_ROLE, USER_ROLE)
# Roles allowed into the dashboard and the read-mostly aggregate endpoints
CONSOLE_ROLES = (ADMIN_ROLE, STAFF_ROLE)

PERMISSION_DESCRIPTIONS: Dict[str, str] = {
    'view_self': 'View own profile',
    'view_users': 'List and view users',
    'create_user': 'Create users',
    'update_user': 'Update users',
    'delete_user': 'Delete users',
    'view_roles': 'List roles',
    'create_role': 'Create roles',
    'update_role': 'Update roles',
    'delete_role': 'Delete roles',
    'view_permissions': 'List permissions',
    'create_permission': 'Create permissions',
    'update_permission': 'Update permissions',
    'delete_permission': 'Delete permissions',
    'export_orders': 'Export orders from the dispatch integration',
}

ALL_PERMISSION_NAMES: List[str] = list(PERMISSION_DESCRIPTIONS)

ROLE_PRESETS: Dict[str, List[str]] = {
    ADMIN_ROLE: ['*'],
    STAFF_ROLE: ['view_self', 'view_users', 'view_roles', 'view_permissions'],
    USER_ROLE: [],
}

ROLE_DESCRIPTIONS: Dict[str, str] = {
    ADMIN_ROLE: 'Full administrative access',
    STAFF_ROLE: 'Read access to the admin console',
    USER_ROLE: 'Regular application user',
}

# Advisory only: the console hides delete actions for these, the store does not enforce it.
PROTECTED_ROLES = frozenset({ADMIN_ROLE})
PROTECTED_PERMISSIONS = frozenset({'create_user', 'update_user', 'delete_user', 'view_users', 'view_self'})


def expand_preset(role_name: str) -> List[str]:
    names = ROLE_PRESETS.get(role_name, [])
    if '*' in names:
        return list(ALL_PERMISSION_NAMES)
    return list(names)
