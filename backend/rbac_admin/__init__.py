from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging

from rbac_admin.config.settings import build_config
from rbac_admin.utils.errors import error_kind
from rbac_admin.utils.responses import error_response

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config.update(build_config())
    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    app.logger.setLevel(getattr(logging, app.config['LOG_LEVEL'], logging.INFO))

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    if db_engine.dialect.name == 'sqlite':
        event.listen(db_engine, 'connect', _enable_sqlite_foreign_keys)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)
    _register_jwt_callbacks()

    from .routes.auth import auth_bp
    from .routes.admin import admin_bp
    from .routes.users import users_bp
    from .routes.roles import roles_bp
    from .routes.permissions import permissions_bp
    from .routes.orders import orders_bp
    prefix = app.config['API_PREFIX']
    app.register_blueprint(auth_bp, url_prefix=f'{prefix}/auth')
    app.register_blueprint(admin_bp, url_prefix=prefix)
    app.register_blueprint(users_bp, url_prefix=prefix)
    app.register_blueprint(roles_bp, url_prefix=prefix)
    app.register_blueprint(permissions_bp, url_prefix=prefix)
    app.register_blueprint(orders_bp, url_prefix=prefix)

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    @app.teardown_appcontext
    def remove_session(exc):  # type: ignore
        if SessionLocal is not None:
            SessionLocal.remove()

    # Unified error handler producing the failure envelope
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            if e.code and e.code >= 500:
                app.logger.error('%s %s', e.code, e.description)
            return error_response(error_kind(e), e.description or e.name, e.code or 500)
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return error_response('Unexpected', 'Unexpected error', 500)

    return app


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def _register_jwt_callbacks():
    """Route every token failure through the envelope as 401 Unauthenticated."""

    @jwt.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        from rbac_admin.models.rbac import User
        try:
            user_id = int(jwt_data['sub'])
        except (KeyError, TypeError, ValueError):
            return None
        return get_db().get(User, user_id)

    @jwt.user_lookup_error_loader
    def unknown_user(_jwt_header, _jwt_data):
        return error_response('Unauthenticated', 'User for token no longer exists', 401)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response('Unauthenticated', 'Access denied. No token provided.', 401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response('Unauthenticated', 'Invalid token', 401)

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return error_response('Unauthenticated', 'Token expired', 401)

    @jwt.revoked_token_loader
    def revoked_token(_jwt_header, _jwt_payload):
        return error_response('Unauthenticated', 'Token revoked', 401)


def get_db():
    return SessionLocal()
