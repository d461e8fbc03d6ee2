from __future__ import annotations
"""Store error boundary for controllers.

Usage:

@store_errors('Error retrieving roles')
def list_roles(): ...

A SQLAlchemyError raised inside the view rolls the session back, is logged
with its traceback and becomes an ``Unexpected`` (500) envelope carrying the
given message. With ``conflict`` set, an IntegrityError (unique index hit by a
concurrent writer) becomes a ``Conflict`` with that message instead. HTTP
errors raised by the view pass through untouched.
"""
from functools import wraps
from typing import Optional
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from rbac_admin.utils.errors import Unexpected, Conflict
from rbac_admin import get_db


def store_errors(message: str, conflict: Optional[str] = None):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except IntegrityError:
                get_db().rollback()
                if conflict:
                    raise Conflict(conflict)
                current_app.logger.exception('%s (%s)', message, fn.__name__)
                raise Unexpected(message)
            except SQLAlchemyError:
                current_app.logger.exception('%s (%s)', message, fn.__name__)
                get_db().rollback()
                raise Unexpected(message)
        return wrapper
    return outer
