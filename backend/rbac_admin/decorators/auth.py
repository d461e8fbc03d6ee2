from functools import wraps
from flask import current_app, request
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from rbac_admin.services import policy
from rbac_admin.utils.errors import Forbidden


def _caller_id() -> int:
    return int(get_jwt_identity())


def require_roles(*names: str):
    """Coarse gate: caller's role name must be one of ``names``."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            user_id = _caller_id()
            if not policy.user_has_any_role(user_id, names):
                current_app.logger.info('Role check failed for user %s on %s %s', user_id, request.method, request.path)
                raise Forbidden('Access denied. Insufficient role.')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_permission(name: str):
    """Fine gate: caller's role must hold the permission ``name``."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            user_id = _caller_id()
            if not policy.user_has_permission(user_id, name):
                current_app.logger.info('Permission %s missing for user %s on %s %s', name, user_id, request.method, request.path)
                raise Forbidden(f'Access denied. Missing permission: {name}')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_token(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        return fn(*args, **kwargs)
    return wrapper
