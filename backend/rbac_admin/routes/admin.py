"""Read-only aggregates for the dashboard: totals by role and role-scoped listings.

Role-scoped endpoints resolve the target role by name first and answer 404
when it is missing, never a zero count.
"""
from flask import Blueprint
from sqlalchemy import select, func
from rbac_admin.models.rbac import User, Role, Permission
from rbac_admin import get_db
from rbac_admin.constants.permissions import ADMIN_ROLE, STAFF_ROLE, USER_ROLE, CONSOLE_ROLES
from rbac_admin.decorators.auth import require_roles
from rbac_admin.decorators.errors import store_errors
from rbac_admin.utils.errors import NotFound
from rbac_admin.utils.responses import success_response
from rbac_admin.utils.serializers import user_json, role_json, permission_json

admin_bp = Blueprint('admin', __name__)


def _role_or_404(name: str) -> Role:
    role = get_db().execute(select(Role).where(Role.name == name)).scalar_one_or_none()
    if role is None:
        raise NotFound(f'{name.capitalize()} role not found')
    return role


def _count_users_with_role(name: str) -> int:
    role = _role_or_404(name)
    return get_db().execute(select(func.count(User.id)).where(User.role_id == role.id)).scalar_one()


def _users_with_role(name: str):
    role = _role_or_404(name)
    rows = get_db().execute(select(User).where(User.role_id == role.id).order_by(User.id.asc())).scalars().all()
    return [user_json(u) for u in rows]


@admin_bp.get('/total-users')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving total users count')
def total_users():
    return success_response({'totalUsers': _count_users_with_role(USER_ROLE)})


@admin_bp.get('/total-staff')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving total staff count')
def total_staff():
    return success_response({'totalStaff': _count_users_with_role(STAFF_ROLE)})


@admin_bp.get('/total-admins')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving total admins count')
def total_admins():
    return success_response({'totalAdmins': _count_users_with_role(ADMIN_ROLE)})


@admin_bp.get('/total-roles')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving total roles count')
def total_roles():
    total = get_db().execute(select(func.count(Role.id))).scalar_one()
    return success_response({'totalRoles': total})


@admin_bp.get('/total-permissions')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving total permissions count')
def total_permissions():
    total = get_db().execute(select(func.count(Permission.id))).scalar_one()
    return success_response({'totalPermissions': total})


@admin_bp.get('/get-all-users')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving users')
def get_all_users():
    return success_response({'users': _users_with_role(USER_ROLE)})


@admin_bp.get('/get-all-staff')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving staff')
def get_all_staff():
    return success_response({'staff': _users_with_role(STAFF_ROLE)})


@admin_bp.get('/get-all-admins')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving admins')
def get_all_admins():
    return success_response({'admins': _users_with_role(ADMIN_ROLE)})


@admin_bp.get('/get-all-roles')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving roles')
def get_all_roles():
    rows = get_db().execute(select(Role).order_by(Role.id.asc())).scalars().all()
    return success_response({'roles': [role_json(r) for r in rows]})


@admin_bp.get('/get-all-permissions')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving permissions')
def get_all_permissions():
    rows = get_db().execute(select(Permission).order_by(Permission.id.asc())).scalars().all()
    return success_response({'permissions': [permission_json(p) for p in rows]})
