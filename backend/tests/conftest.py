import os, sys, pytest
# Ensure backend directory is on path so 'rbac_admin' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from rbac_admin import create_app, get_db
from rbac_admin.models.rbac import Base
from rbac_admin.services.seed import ensure_permissions, ensure_roles

TEST_CONFIG = {
    'TESTING': True,
    'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
    # HS256 wants at least 32 bytes of key
    'JWT_SECRET_KEY': 'test-secret-key-0123456789abcdef0123456789',
    'EXPORT_API_BASE_URL': '',
}


@pytest.fixture()
def app_instance():
    # Fresh in-memory database per test; built-in permissions and roles seeded
    app = create_app(dict(TEST_CONFIG))
    with app.app_context():
        session = get_db()
        Base.metadata.create_all(session.get_bind())
        ensure_permissions(session)
        ensure_roles(session)
        session.commit()
    yield app
    with app.app_context():
        get_db().close()


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
