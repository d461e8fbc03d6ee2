from __future__ import annotations
"""Idempotent seeding of the built-in permissions, roles and first admin.

Each ensure_* function only adds what is missing and returns how many rows it
created; the caller owns the transaction (commit / rollback).
"""
import logging
import os
from typing import Dict, List, Tuple
from sqlalchemy import select
from rbac_admin.models.rbac import Permission, Role, RolePermission, User
from rbac_admin.constants.permissions import (
    PERMISSION_DESCRIPTIONS, BUILTIN_ROLES, ROLE_DESCRIPTIONS, ADMIN_ROLE, expand_preset,
)

logger = logging.getLogger(__name__)


def ensure_permissions(session) -> int:
    existing = set(session.execute(select(Permission.name)).scalars().all())
    created = 0
    for name, description in PERMISSION_DESCRIPTIONS.items():
        if name not in existing:
            session.add(Permission(name=name, description=description))
            created += 1
    session.flush()
    return created


def ensure_roles(session) -> int:
    """Create missing built-in roles and attach any preset permission they lack.

    Permissions removed from a role by an administrator are re-added only if
    they belong to the role's preset.
    """
    existing_roles = {r.name: r for r in session.execute(select(Role)).scalars().all()}
    created = 0
    for role_name in BUILTIN_ROLES:
        if role_name not in existing_roles:
            role = Role(name=role_name, description=ROLE_DESCRIPTIONS.get(role_name, ''))
            session.add(role)
            existing_roles[role_name] = role
            created += 1
    session.flush()

    perms_by_name = {p.name: p for p in session.execute(select(Permission)).scalars().all()}
    for role_name in BUILTIN_ROLES:
        role = existing_roles[role_name]
        current = {p.name for p in role.permissions}
        for name in expand_preset(role_name):
            if name in current:
                continue
            perm = perms_by_name.get(name)
            if perm is None:
                logger.warning("Missing permission referenced by role %s: %s", role_name, name)
                continue
            role.role_permissions.append(RolePermission(permission=perm))
    session.flush()
    return created


def ensure_initial_admin(session) -> bool:
    admin_role = session.execute(select(Role).where(Role.name == ADMIN_ROLE)).scalar_one_or_none()
    if not admin_role:
        logger.warning('admin role missing; skipping admin user creation')
        return False
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com').strip().lower()
    if session.execute(select(User).where(User.email == admin_email)).scalar_one_or_none():
        return False
    user = User(name='Administrator', email=admin_email, gender='other', role=admin_role, password_hash='')
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user)
    session.flush()
    logger.info("Created initial admin user %s with temporary password", admin_email)
    return True


def summarize_roles(session) -> List[Tuple[str, int, List[str]]]:
    rows = []
    for role in session.execute(select(Role).order_by(Role.name)).scalars().all():
        names = sorted(role.permission_names())
        rows.append((role.name, len(names), names[:8]))
    return rows


def seed_all(session) -> Dict[str, int]:
    return {
        'permissions': ensure_permissions(session),
        'roles': ensure_roles(session),
        'admins': int(ensure_initial_admin(session)),
    }
