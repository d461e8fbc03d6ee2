from sqlalchemy.exc import OperationalError
from tests.test_utils_seed import PREFIX, seed_user_and_login


def test_unknown_path_returns_error_envelope(client):
    resp = client.get('/non-existent-path')
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['success'] is False
    assert body['error'] == 'NotFound'
    assert body['message']


def test_wrong_method_is_validation_error(client):
    resp = client.patch(f'{PREFIX}/auth/signin', json={})
    assert resp.status_code == 405
    assert resp.get_json()['error'] == 'ValidationError'


def test_non_object_body_is_rejected(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    resp = client.post(f'{PREFIX}/roles', json=['not', 'an', 'object'], headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'JSON object body required'


def test_store_error_in_view_is_unexpected(client, monkeypatch):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    import rbac_admin.routes.admin as admin_mod

    class BoomSession:
        def execute(self, *a, **k):
            raise OperationalError('SELECT', {}, Exception('disk I/O error'))

    # Only the view's store access breaks; the permission gate still works
    monkeypatch.setattr(admin_mod, 'get_db', lambda: BoomSession())
    resp = client.get(f'{PREFIX}/total-roles', headers=headers)
    assert resp.status_code == 500
    assert resp.get_json() == {'success': False, 'error': 'Unexpected', 'message': 'Error retrieving total roles count'}


def test_internal_error_shape(client, monkeypatch):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    import rbac_admin.routes.admin as admin_mod

    class BoomSession:
        def execute(self, *a, **k):
            raise RuntimeError('explode')

    monkeypatch.setattr(admin_mod, 'get_db', lambda: BoomSession())
    resp = client.get(f'{PREFIX}/get-all-roles', headers=headers)
    assert resp.status_code == 500
    assert resp.get_json() == {'success': False, 'error': 'Unexpected', 'message': 'Unexpected error'}
