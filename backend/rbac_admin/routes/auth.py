from flask import Blueprint, request, current_app
from flask_jwt_extended import create_access_token, current_user
from sqlalchemy import select
from rbac_admin.models.rbac import User
from rbac_admin import get_db
from rbac_admin.decorators.auth import require_token
from rbac_admin.decorators.errors import store_errors
from rbac_admin.utils.errors import Unauthenticated
from rbac_admin.utils.responses import success_response
from rbac_admin.utils.serializers import user_json
from rbac_admin.utils.validation import json_body, require_fields, validate_gender, validate_text, validate_password

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/signin')
@store_errors('Error signing in')
def signin():
    data = json_body(request)
    require_fields(data, 'email', 'password')
    email = str(data['email']).strip().lower()
    session = get_db()
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not user.verify_password(str(data['password'])):
        current_app.logger.info('Failed sign-in for %s', email)
        raise Unauthenticated('Invalid email or password')
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id))
    return success_response({'token': token, 'user': user_json(user)}, 'Login successful')


@auth_bp.get('/me')
@require_token
@store_errors('Error retrieving profile')
def me():
    return success_response({'user': user_json(current_user)})


@auth_bp.put('/me')
@require_token
@store_errors('Error updating profile')
def update_me():
    """Profile settings: callers may change their own name, gender and password only."""
    data = json_body(request)
    user = current_user
    if 'name' in data:
        user.name = validate_text(data.get('name'), 'name', allow_empty=False)
    if 'gender' in data:
        user.gender = validate_gender(data.get('gender'))
    if 'password' in data:
        user.set_password(validate_password(data.get('password')))
    get_db().commit()
    return success_response({'user': user_json(user)}, 'Profile updated successfully')
