from sqlalchemy import select
from rbac_admin import get_db
from rbac_admin.models.rbac import Role, RolePermission, User
from tests.test_utils_seed import PREFIX, ensure_role, ensure_user, seed_user_and_login


def _names(role_body):
    return sorted(p['name'] for p in role_body['permissions'])


def test_role_crud_flow(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')

    resp = client.post(f'{PREFIX}/roles', json={'name': 'Auditor', 'description': 'Reads things', 'permissions': ['view_users', 'VIEW_ROLES']}, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    assert body['message'] == 'Role created successfully'
    role = body['data']['role']
    assert role['name'] == 'auditor'
    assert _names(role) == ['view_roles', 'view_users']
    role_id = role['id']

    # Read back via the single-role endpoint: permissions are populated
    got = client.get(f'{PREFIX}/roles/{role_id}', headers=headers)
    assert got.status_code == 200
    assert _names(got.get_json()['data']['role']) == ['view_roles', 'view_users']

    # Replace the permission set
    upd = client.put(f'{PREFIX}/roles/{role_id}', json={'permissions': ['view_users', 'export_orders']}, headers=headers)
    assert upd.status_code == 200, upd.get_json()
    assert _names(upd.get_json()['data']['role']) == ['export_orders', 'view_users']
    assert upd.get_json()['data']['role']['description'] == 'Reads things'

    # Partial update leaves permissions alone
    upd = client.put(f'{PREFIX}/roles/{role_id}', json={'description': 'Updated'}, headers=headers)
    assert _names(upd.get_json()['data']['role']) == ['export_orders', 'view_users']

    listing = client.get(f'{PREFIX}/roles', headers=headers)
    assert listing.status_code == 200
    data = listing.get_json()['data']
    assert 'auditor' in [r['name'] for r in data['roles']]
    assert data['pagination']['total'] == 4

    deleted = client.delete(f'{PREFIX}/roles/{role_id}', headers=headers)
    assert deleted.status_code == 200
    assert deleted.get_json()['data'] == {'id': role_id}
    assert client.get(f'{PREFIX}/roles/{role_id}', headers=headers).status_code == 404
    remaining = get_db().execute(select(RolePermission).where(RolePermission.role_id == role_id)).scalars().all()
    assert remaining == []


def test_duplicate_role_name_is_conflict(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    resp = client.post(f'{PREFIX}/roles', json={'name': 'Staff'}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'error': 'Conflict', 'message': 'Role already exists'}

    other_id = ensure_role('other')
    resp = client.put(f'{PREFIX}/roles/{other_id}', json={'name': 'staff'}, headers=headers)
    assert resp.get_json()['error'] == 'Conflict'


def test_role_validation_errors(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    resp = client.post(f'{PREFIX}/roles', json={'description': 'no name'}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'ValidationError'
    resp = client.post(f'{PREFIX}/roles', json={'name': 'bad name!'}, headers=headers)
    assert resp.status_code == 400
    resp = client.post(f'{PREFIX}/roles', json={'name': 'ghosty', 'permissions': ['does_not_exist']}, headers=headers)
    assert resp.status_code == 400
    assert 'does_not_exist' in resp.get_json()['message']
    # Nothing was written
    assert get_db().execute(select(Role).where(Role.name == 'ghosty')).scalar_one_or_none() is None
    resp = client.post(f'{PREFIX}/roles', json={'name': 'listy', 'permissions': 'view_users'}, headers=headers)
    assert resp.status_code == 400


def test_missing_role_is_404(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    for method in ('get', 'put', 'delete'):
        resp = getattr(client, method)(f'{PREFIX}/roles/9999', json={}, headers=headers)
        assert resp.status_code == 404
        assert resp.get_json() == {'success': False, 'error': 'NotFound', 'message': 'Role not found'}


def test_add_and_remove_permission(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    role_id = ensure_role('editor', ['view_self'])
    resp = client.post(f'{PREFIX}/roles/add-permission/{role_id}', json={'permission': 'update_user'}, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    assert _names(resp.get_json()['data']['role']) == ['update_user', 'view_self']

    # Adding again is idempotent
    resp = client.post(f'{PREFIX}/roles/add-permission/{role_id}', json={'permissions': ['update_user', 'view_users']}, headers=headers)
    assert _names(resp.get_json()['data']['role']) == ['update_user', 'view_self', 'view_users']

    resp = client.post(f'{PREFIX}/roles/remove-permission/{role_id}', json={'permissions': ['view_self', 'update_user']}, headers=headers)
    assert resp.status_code == 200
    assert _names(resp.get_json()['data']['role']) == ['view_users']

    resp = client.post(f'{PREFIX}/roles/add-permission/{role_id}', json={}, headers=headers)
    assert resp.status_code == 400


def test_deleting_role_keeps_users_without_role(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    role_id = ensure_role('temporary', ['view_users'])
    member_id = ensure_user('member@example.com', 'temporary')
    resp = client.delete(f'{PREFIX}/roles/{role_id}', headers=headers)
    assert resp.status_code == 200
    member = get_db().get(User, member_id)
    assert member is not None
    assert member.role_id is None


def test_pagination_params(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    for i in range(3):
        ensure_role(f'extra_{i}')
    resp = client.get(f'{PREFIX}/roles?limit=2&offset=1', headers=headers)
    meta = resp.get_json()['data']['pagination']
    assert meta == {'total': 6, 'limit': 2, 'offset': 1, 'returned': 2}
    bad = client.get(f'{PREFIX}/roles?limit=abc', headers=headers)
    assert bad.status_code == 400


def test_listing_and_single_fetch_agree_on_permissions(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    ensure_role('mixed', ['view_users', 'export_orders', 'view_self'])
    roles = client.get(f'{PREFIX}/roles', headers=headers).get_json()['data']['roles']
    for listed in roles:
        for perm in listed['permissions']:
            assert perm['name'] and 'description' in perm and perm['id']
        single = client.get(f"{PREFIX}/roles/{listed['id']}", headers=headers).get_json()['data']['role']
        assert set(_names(single)) == set(_names(listed))
    mixed = next(r for r in roles if r['name'] == 'mixed')
    assert _names(mixed) == ['export_orders', 'view_self', 'view_users']


def test_non_string_description_is_validation_error(client):
    _, headers = seed_user_and_login(client, 'owner@example.com', 'admin')
    resp = client.post(f'{PREFIX}/roles', json={'name': 'typed', 'description': 5}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'ValidationError'
    assert get_db().execute(select(Role).where(Role.name == 'typed')).scalar_one_or_none() is None

    role_id = ensure_role('typed')
    resp = client.put(f'{PREFIX}/roles/{role_id}', json={'description': ['a', 'b']}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'description must be a string'
