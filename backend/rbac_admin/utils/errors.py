from __future__ import annotations
"""Error taxonomy shared by every endpoint.

Each kind is a Werkzeug HTTPException so it can be raised anywhere inside a
request and is rendered by the application error handler into the failure
envelope ``{"success": false, "error": <kind>, "message": <description>}``.
Plain ``abort(code)`` calls map onto the same kinds through ``KIND_BY_STATUS``.
"""
from werkzeug.exceptions import BadRequest, Unauthorized, Forbidden as _Forbidden, NotFound as _NotFound, InternalServerError


class ValidationError(BadRequest):
    kind = 'ValidationError'
    description = 'Invalid request'


class Conflict(BadRequest):
    # Duplicate unique field; reported as 400 on the wire
    kind = 'Conflict'
    description = 'Resource already exists'


class Unauthenticated(Unauthorized):
    kind = 'Unauthenticated'
    description = 'Authentication required'


class Forbidden(_Forbidden):
    kind = 'Forbidden'
    description = 'Access denied'


class NotFound(_NotFound):
    kind = 'NotFound'
    description = 'Resource not found'


class Unexpected(InternalServerError):
    kind = 'Unexpected'
    description = 'Unexpected error'


KIND_BY_STATUS = {
    400: 'ValidationError',
    401: 'Unauthenticated',
    403: 'Forbidden',
    404: 'NotFound',
    405: 'ValidationError',
    409: 'Conflict',
    415: 'ValidationError',
    422: 'ValidationError',
}


def error_kind(exc) -> str:
    kind = getattr(exc, 'kind', None)
    if kind:
        return kind
    return KIND_BY_STATUS.get(getattr(exc, 'code', 500) or 500, 'Unexpected')


__all__ = [
    'ValidationError', 'Conflict', 'Unauthenticated', 'Forbidden', 'NotFound', 'Unexpected',
    'KIND_BY_STATUS', 'error_kind',
]
