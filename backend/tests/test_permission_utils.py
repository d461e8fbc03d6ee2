from types import SimpleNamespace
import pytest
from rbac_admin.constants.permissions import ALL_PERMISSION_NAMES, expand_preset
from rbac_admin.utils.errors import ValidationError
from rbac_admin.utils.permissions import normalize_name, permission_names, role_has_permission, role_has_name
from rbac_admin.utils.validation import validate_entity_name, validate_name_list, validate_gender, ensure_known
from rbac_admin.config.pagination import normalize_pagination, MAX_LIMIT


def test_role_has_permission_accepts_json_and_objects():
    as_json = {'name': 'staff', 'permissions': [{'name': 'View_Users'}, {'name': 'view_roles'}]}
    as_obj = SimpleNamespace(name='staff', permissions=[SimpleNamespace(name='view_users')])
    as_strings = {'name': 'x', 'permissions': ['export_orders']}
    assert role_has_permission(as_json, 'view_users')
    assert role_has_permission(as_json, 'VIEW_USERS ')
    assert role_has_permission(as_obj, 'view_users')
    assert role_has_permission(as_strings, 'export_orders')
    assert not role_has_permission(as_json, 'delete_role')


def test_missing_or_empty_role_denies():
    assert not role_has_permission(None, 'view_users')
    assert not role_has_permission({'name': 'staff', 'permissions': []}, 'view_users')
    assert not role_has_permission({'name': 'staff'}, 'view_users')
    assert not role_has_permission({'name': 'staff', 'permissions': [{'name': ''}]}, '')
    assert permission_names(None) == set()


def test_role_has_name():
    assert role_has_name({'name': 'Admin'}, ('admin', 'staff'))
    assert not role_has_name({'name': 'user'}, ('admin', 'staff'))
    assert not role_has_name(None, ('admin',))
    assert normalize_name(None) == ''


def test_admin_preset_expands_to_everything():
    assert expand_preset('admin') == ALL_PERMISSION_NAMES
    assert 'delete_role' not in expand_preset('staff')
    assert expand_preset('user') == []
    assert expand_preset('unknown') == []


def test_name_validation():
    assert validate_entity_name(' Export_Orders ') == 'export_orders'
    with pytest.raises(ValidationError):
        validate_entity_name('has space')
    with pytest.raises(ValidationError):
        validate_entity_name(None)
    assert validate_name_list(['A', 'a', ' b ']) == ['a', 'b']
    with pytest.raises(ValidationError):
        validate_name_list('a')
    with pytest.raises(ValidationError):
        validate_gender('unknown')
    with pytest.raises(ValidationError) as info:
        ensure_known(['a', 'b'], ['a'], 'permissions')
    assert "['b']" in info.value.description


def test_pagination_bounds():
    assert normalize_pagination(None, None) == (50, 0)
    assert normalize_pagination('1000', '-3') == (MAX_LIMIT, 0)
    with pytest.raises(ValidationError):
        normalize_pagination('x', None)
