from flask import Blueprint, request
from sqlalchemy import select
from rbac_admin.models.rbac import Permission
from rbac_admin import get_db
from rbac_admin.config.pagination import paginate
from rbac_admin.constants.permissions import ADMIN_ROLE
from rbac_admin.decorators.auth import require_permission, require_roles
from rbac_admin.decorators.errors import store_errors
from rbac_admin.utils.errors import NotFound, Conflict
from rbac_admin.utils.permissions import normalize_name
from rbac_admin.utils.responses import success_response
from rbac_admin.utils.serializers import permission_json
from rbac_admin.utils.validation import json_body, validate_entity_name, validate_text

permissions_bp = Blueprint('permissions', __name__)


def _get_permission(permission_id: int) -> Permission:
    perm = get_db().execute(select(Permission).where(Permission.id == permission_id)).scalar_one_or_none()
    if not perm:
        raise NotFound('Permission not found')
    return perm


@permissions_bp.get('/permissions')
@require_permission('view_permissions')
@store_errors('Error retrieving permissions')
def list_permissions():
    q = get_db().query(Permission).order_by(Permission.id.asc())
    rows, pagination = paginate(q, request.args)
    return success_response({'permissions': [permission_json(p) for p in rows], 'pagination': pagination})


@permissions_bp.post('/permissions')
@require_permission('create_permission')
@store_errors('Error creating permission', conflict='Permission already exists')
def create_permission():
    data = json_body(request)
    name = validate_entity_name(data.get('name'))
    session = get_db()
    if session.execute(select(Permission).where(Permission.name == name)).scalar_one_or_none():
        raise Conflict('Permission already exists')
    perm = Permission(name=name, description=validate_text(data.get('description'), 'description'))
    session.add(perm)
    session.commit()
    return success_response({'permission': permission_json(perm)}, 'Permission created successfully', 201)


@permissions_bp.get('/permissions/<int:permission_id>')
@require_roles(ADMIN_ROLE)
@store_errors('Error retrieving permission')
def get_permission(permission_id: int):
    return success_response({'permission': permission_json(_get_permission(permission_id))})


@permissions_bp.get('/permissions/name/<name>')
@require_roles(ADMIN_ROLE)
@store_errors('Error retrieving permission')
def get_permission_by_name(name: str):
    perm = get_db().execute(select(Permission).where(Permission.name == normalize_name(name))).scalar_one_or_none()
    if not perm:
        raise NotFound('Permission not found')
    return success_response({'permission': permission_json(perm)})


@permissions_bp.put('/permissions/<int:permission_id>')
@require_permission('update_permission')
@store_errors('Error updating permission', conflict='Permission already exists')
def update_permission(permission_id: int):
    session = get_db()
    perm = _get_permission(permission_id)
    data = json_body(request)
    if 'name' in data:
        new_name = validate_entity_name(data.get('name'))
        existing = session.execute(select(Permission).where(Permission.name == new_name, Permission.id != perm.id)).scalar_one_or_none()
        if existing:
            raise Conflict('Permission already exists')
        perm.name = new_name
    if 'description' in data:
        perm.description = validate_text(data.get('description'), 'description')
    session.commit()
    return success_response({'permission': permission_json(perm)}, 'Permission updated successfully')


@permissions_bp.delete('/permissions/<int:permission_id>')
@require_permission('delete_permission')
@store_errors('Error deleting permission')
def delete_permission(permission_id: int):
    session = get_db()
    perm = _get_permission(permission_id)
    # Join rows go with it (cascade); roles themselves are untouched
    session.delete(perm)
    session.commit()
    return success_response({'id': permission_id}, 'Permission deleted successfully')
