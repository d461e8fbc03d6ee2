from sqlalchemy import select
from rbac_admin import get_db
from rbac_admin.models.rbac import Role
from tests.test_utils_seed import PREFIX, ensure_role, seed_user_and_login


def test_permission_crud_flow(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    resp = client.post(f'{PREFIX}/permissions', json={'name': 'Manage_Billing', 'description': 'Billing screens'}, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    perm = resp.get_json()['data']['permission']
    assert perm['name'] == 'manage_billing'

    by_id = client.get(f"{PREFIX}/permissions/{perm['id']}", headers=headers)
    assert by_id.status_code == 200
    by_name = client.get(f'{PREFIX}/permissions/name/MANAGE_BILLING', headers=headers)
    assert by_name.get_json()['data']['permission']['id'] == perm['id']

    upd = client.put(f"{PREFIX}/permissions/{perm['id']}", json={'description': 'Billing'}, headers=headers)
    assert upd.status_code == 200
    assert upd.get_json()['data']['permission']['description'] == 'Billing'

    listing = client.get(f'{PREFIX}/permissions', headers=headers)
    names = [p['name'] for p in listing.get_json()['data']['permissions']]
    assert 'manage_billing' in names and 'export_orders' in names

    dup = client.post(f'{PREFIX}/permissions', json={'name': 'manage_billing'}, headers=headers)
    assert dup.status_code == 400
    assert dup.get_json()['error'] == 'Conflict'
    assert dup.get_json()['message'] == 'Permission already exists'

    gone = client.delete(f"{PREFIX}/permissions/{perm['id']}", headers=headers)
    assert gone.status_code == 200
    assert client.get(f"{PREFIX}/permissions/{perm['id']}", headers=headers).status_code == 404
    assert client.get(f'{PREFIX}/permissions/name/manage_billing', headers=headers).status_code == 404


def test_deleting_permission_pulls_it_from_roles(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    role_id = ensure_role('reporter', ['view_reports', 'view_self'])
    perm_id = client.get(f'{PREFIX}/permissions/name/view_reports', headers=headers).get_json()['data']['permission']['id']

    resp = client.delete(f'{PREFIX}/permissions/{perm_id}', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data'] == {'id': perm_id}

    role = client.get(f'{PREFIX}/roles/{role_id}', headers=headers).get_json()['data']['role']
    assert [p['name'] for p in role['permissions']] == ['view_self']
    assert get_db().execute(select(Role).where(Role.id == role_id)).scalar_one_or_none() is not None


def test_permission_endpoints_require_permission(client):
    _, headers = seed_user_and_login(client, 'staffy@example.com', 'staff')
    assert client.get(f'{PREFIX}/permissions', headers=headers).status_code == 200
    resp = client.delete(f'{PREFIX}/permissions/1', headers=headers)
    assert resp.status_code == 403
    assert resp.get_json()['message'] == 'Access denied. Missing permission: delete_permission'
    # Single-permission reads are admin only
    assert client.get(f'{PREFIX}/permissions/1', headers=headers).status_code == 403


def test_non_string_description_is_validation_error(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    resp = client.post(f'{PREFIX}/permissions', json={'name': 'billing', 'description': 5}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'error': 'ValidationError', 'message': 'description must be a string'}
    assert client.get(f'{PREFIX}/permissions/name/billing', headers=headers).status_code == 404

    created = client.post(f'{PREFIX}/permissions', json={'name': 'billing'}, headers=headers).get_json()['data']['permission']
    assert created['description'] == ''
    resp = client.put(f"{PREFIX}/permissions/{created['id']}", json={'description': {'text': 'x'}}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'ValidationError'
