from flask import Blueprint, request
from sqlalchemy import select
from rbac_admin.models.rbac import User, Role
from rbac_admin import get_db
from rbac_admin.config.pagination import paginate
from rbac_admin.constants.permissions import USER_ROLE
from rbac_admin.decorators.auth import require_permission
from rbac_admin.decorators.errors import store_errors
from rbac_admin.utils.errors import NotFound, Conflict, ValidationError
from rbac_admin.utils.permissions import normalize_name
from rbac_admin.utils.responses import success_response
from rbac_admin.utils.serializers import user_json
from rbac_admin.utils.validation import (
    json_body, require_fields, validate_email, validate_gender,
    validate_text, validate_password,
)

users_bp = Blueprint('users', __name__)


def _get_user(user_id: int) -> User:
    user = get_db().execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise NotFound('User not found')
    return user


def _role_by_name(raw) -> Role:
    name = normalize_name(raw) if isinstance(raw, str) else ''
    role = get_db().execute(select(Role).where(Role.name == name)).scalar_one_or_none()
    if not role:
        raise ValidationError(f'Unknown role: {name or raw!r}')
    return role


@users_bp.get('/users')
@require_permission('view_users')
@store_errors('Error retrieving users')
def list_users():
    q = get_db().query(User).order_by(User.id.asc())
    role_name = request.args.get('role')
    if role_name:
        q = q.join(Role, User.role_id == Role.id).filter(Role.name == normalize_name(role_name))
    rows, pagination = paginate(q, request.args)
    return success_response({'users': [user_json(u) for u in rows], 'pagination': pagination})


@users_bp.get('/users/<int:user_id>')
@require_permission('view_users')
@store_errors('Error retrieving user')
def get_user(user_id: int):
    return success_response({'user': user_json(_get_user(user_id))})


@users_bp.post('/users')
@require_permission('create_user')
@store_errors('Error creating user', conflict='User already exists')
def create_user():
    data = json_body(request)
    require_fields(data, 'name', 'email', 'password')
    email = validate_email(data['email'])
    session = get_db()
    if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
        raise Conflict('User already exists')
    user = User(
        name=validate_text(data['name'], 'name', allow_empty=False),
        email=email,
        gender=validate_gender(data.get('gender') or 'other'),
        role=_role_by_name(data.get('role') or USER_ROLE),
        password_hash='',
    )
    user.set_password(validate_password(data['password']))
    session.add(user)
    session.commit()
    return success_response({'user': user_json(user)}, 'User created successfully', 201)


@users_bp.put('/users/<int:user_id>')
@require_permission('update_user')
@store_errors('Error updating user', conflict='User already exists')
def update_user(user_id: int):
    session = get_db()
    user = _get_user(user_id)
    data = json_body(request)
    if 'name' in data:
        user.name = validate_text(data.get('name'), 'name', allow_empty=False)
    if 'email' in data:
        email = validate_email(data.get('email'))
        existing = session.execute(select(User).where(User.email == email, User.id != user.id)).scalar_one_or_none()
        if existing:
            raise Conflict('User already exists')
        user.email = email
    if 'gender' in data:
        user.gender = validate_gender(data.get('gender'))
    if 'role' in data:
        user.role = _role_by_name(data.get('role'))
    if data.get('password'):
        user.set_password(validate_password(data['password']))
    session.commit()
    return success_response({'user': user_json(user)}, 'User updated successfully')


@users_bp.delete('/users/<int:user_id>')
@require_permission('delete_user')
@store_errors('Error deleting user')
def delete_user(user_id: int):
    session = get_db()
    session.delete(_get_user(user_id))
    session.commit()
    return success_response({'id': user_id}, 'User deleted successfully')
