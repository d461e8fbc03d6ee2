from __future__ import annotations
"""Authorization decisions against the live store.

Every check re-reads the caller's role (with permissions) per request; there
is no permission cache. Any failure to resolve the role denies.
"""
from typing import Iterable, Optional
from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from rbac_admin.models.rbac import User, Role, RolePermission
from rbac_admin.utils.permissions import role_has_permission, role_has_name
from rbac_admin import get_db


class RoleResolutionError(Exception):
    """The caller's role could not be read from the store."""


def load_role_for_user(user_id: int) -> Optional[Role]:
    """Fetch the user's role with its permissions populated, or None when the user has no role."""
    session = get_db()
    try:
        role_id = session.execute(select(User.role_id).where(User.id == user_id)).scalar_one_or_none()
        if role_id is None:
            return None
        return session.execute(
            select(Role)
            .options(selectinload(Role.role_permissions).joinedload(RolePermission.permission))
            .where(Role.id == role_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
    except SQLAlchemyError as e:
        session.rollback()
        raise RoleResolutionError(str(e)) from e


def user_has_any_role(user_id: int, allowed: Iterable[str]) -> bool:
    try:
        role = load_role_for_user(user_id)
    except RoleResolutionError:
        current_app.logger.exception('Role lookup failed for user %s; denying', user_id)
        return False
    return role is not None and role_has_name(role, allowed)


def user_has_permission(user_id: int, name: str) -> bool:
    try:
        role = load_role_for_user(user_id)
    except RoleResolutionError:
        current_app.logger.exception('Role lookup failed for user %s; denying', user_id)
        return False
    # role_has_permission is False for a missing role or an empty permission set
    return role_has_permission(role, name)
