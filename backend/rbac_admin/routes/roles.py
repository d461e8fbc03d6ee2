from flask import Blueprint, request
from sqlalchemy import select
from rbac_admin.models.rbac import Role, Permission, RolePermission, User
from rbac_admin import get_db
from rbac_admin.config.pagination import paginate
from rbac_admin.constants.permissions import ADMIN_ROLE, CONSOLE_ROLES
from rbac_admin.decorators.auth import require_permission, require_roles, require_token
from rbac_admin.decorators.errors import store_errors
from rbac_admin.utils.errors import NotFound, Conflict, ValidationError
from rbac_admin.utils.responses import success_response
from rbac_admin.utils.serializers import role_json
from rbac_admin.utils.validation import json_body, validate_entity_name, validate_text, validate_name_list, ensure_known

roles_bp = Blueprint('roles', __name__)


def _get_role(role_id: int) -> Role:
    role = get_db().execute(select(Role).where(Role.id == role_id)).scalar_one_or_none()
    if not role:
        raise NotFound('Role not found')
    return role


def _resolve_permissions(names):
    """Map permission names -> Permission rows; unknown names are a 400."""
    if not names:
        return []
    perms = get_db().execute(select(Permission).where(Permission.name.in_(names))).scalars().all()
    ensure_known(names, {p.name for p in perms}, 'permissions')
    return perms


def _set_role_permissions(role: Role, perms) -> None:
    """Diff the join rows so unchanged links are kept (unique (role, permission) pairs)."""
    session = get_db()
    wanted = {p.id: p for p in perms}
    for rp in list(role.role_permissions):
        if rp.permission_id not in wanted:
            role.role_permissions.remove(rp)
            session.delete(rp)
    present = {rp.permission_id for rp in role.role_permissions}
    for pid, perm in wanted.items():
        if pid not in present:
            role.role_permissions.append(RolePermission(permission=perm))


def _permission_names_from(data) -> list:
    if 'permissions' in data:
        return validate_name_list(data.get('permissions'))
    if 'permission' in data:
        return validate_name_list([data.get('permission')], 'permission')
    raise ValidationError('permissions required')


@roles_bp.get('/roles')
@require_permission('view_roles')
@store_errors('Error retrieving roles')
def list_roles():
    q = get_db().query(Role).order_by(Role.id.asc())
    rows, pagination = paginate(q, request.args)
    return success_response({'roles': [role_json(r) for r in rows], 'pagination': pagination})


@roles_bp.post('/roles')
@require_permission('create_role')
@store_errors('Error creating role', conflict='Role already exists')
def create_role():
    data = json_body(request)
    name = validate_entity_name(data.get('name'))
    session = get_db()
    if session.execute(select(Role).where(Role.name == name)).scalar_one_or_none():
        raise Conflict('Role already exists')
    perms = _resolve_permissions(validate_name_list(data.get('permissions') or []))
    role = Role(name=name, description=validate_text(data.get('description'), 'description'))
    for p in perms:
        role.role_permissions.append(RolePermission(permission=p))
    session.add(role)
    session.commit()
    return success_response({'role': role_json(role)}, 'Role created successfully', 201)


@roles_bp.get('/roles/<int:role_id>')
@require_roles(*CONSOLE_ROLES)
@store_errors('Error retrieving role')
def get_role(role_id: int):
    return success_response({'role': role_json(_get_role(role_id))})


@roles_bp.put('/roles/<int:role_id>')
@require_permission('update_role')
@store_errors('Error updating role', conflict='Role already exists')
def update_role(role_id: int):
    session = get_db()
    role = _get_role(role_id)
    data = json_body(request)
    if 'name' in data:
        new_name = validate_entity_name(data.get('name'))
        existing = session.execute(select(Role).where(Role.name == new_name, Role.id != role.id)).scalar_one_or_none()
        if existing:
            raise Conflict('Role already exists')
        role.name = new_name
    if 'description' in data:
        role.description = validate_text(data.get('description'), 'description')
    if 'permissions' in data:
        # Last writer wins: the submitted list replaces the whole set
        names = validate_name_list(data.get('permissions'))
        _set_role_permissions(role, _resolve_permissions(names))
    session.commit()
    return success_response({'role': role_json(role)}, 'Role updated successfully')


@roles_bp.delete('/roles/<int:role_id>')
@require_permission('delete_role')
@store_errors('Error deleting role')
def delete_role(role_id: int):
    session = get_db()
    role = _get_role(role_id)
    # Users of the role are kept with role_id NULL and fail every role/permission check
    session.delete(role)
    session.commit()
    return success_response({'id': role_id}, 'Role deleted successfully')


@roles_bp.post('/roles/add-permission/<int:role_id>')
@require_roles(ADMIN_ROLE)
@store_errors('Error adding permission to role')
def add_permission_to_role(role_id: int):
    role = _get_role(role_id)
    perms = _resolve_permissions(_permission_names_from(json_body(request)))
    _set_role_permissions(role, list({p.id: p for p in list(role.permissions) + list(perms)}.values()))
    get_db().commit()
    return success_response({'role': role_json(role)}, 'Permission added to role')


@roles_bp.post('/roles/remove-permission/<int:role_id>')
@require_roles(ADMIN_ROLE)
@store_errors('Error removing permission from role')
def remove_permission_from_role(role_id: int):
    role = _get_role(role_id)
    perms = _resolve_permissions(_permission_names_from(json_body(request)))
    drop = {p.id for p in perms}
    _set_role_permissions(role, [p for p in role.permissions if p.id not in drop])
    get_db().commit()
    return success_response({'role': role_json(role)}, 'Permission removed from role')


@roles_bp.get('/get-role-from-user-id/<int:user_id>')
@require_token
@store_errors('Error retrieving role for user')
def get_role_from_user_id(user_id: int):
    user = get_db().execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise NotFound('User not found')
    if user.role is None:
        raise NotFound('Role not found for user')
    return success_response({'role': role_json(user.role)})
