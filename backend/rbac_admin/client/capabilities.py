"""Console-side capability resolution.

Decides whether a gated affordance (nav entry, button, route) is shown. This
is a display convenience only; the API gate enforces the same rule on every
privileged endpoint.

Each capability moves ``idle -> loading -> resolved-allowed | resolved-denied``
and reads as denied until resolved. The role is re-fetched from
``/get-role-from-user-id/<id>``; when that fetch is impossible (no token) or
fails, the role cached at sign-in decides. No retries.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rbac_admin.client.exceptions import APIError
from rbac_admin.client.session import SessionContext
from rbac_admin.constants.permissions import CONSOLE_ROLES, PROTECTED_PERMISSIONS, PROTECTED_ROLES
from rbac_admin.utils.permissions import normalize_name, role_has_name, role_has_permission

logger = logging.getLogger(__name__)


class CapabilityState(str, Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    ALLOWED = 'resolved-allowed'
    DENIED = 'resolved-denied'


@dataclass
class Capability:
    permission: str
    state: CapabilityState = CapabilityState.IDLE
    history: List[CapabilityState] = field(default_factory=lambda: [CapabilityState.IDLE])
    # 'server' when decided by the fresh role, 'cache' when by the sign-in copy, None when nothing was available
    source: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.state is CapabilityState.ALLOWED

    def _move(self, state: CapabilityState) -> None:
        self.state = state
        self.history.append(state)


class CapabilityResolver:

    def __init__(self, api, session: SessionContext):
        self.api = api
        self.session = session
        self.capabilities: Dict[str, Capability] = {}

    def capability(self, permission: str) -> Capability:
        """Return the tracked capability for ``permission`` (idle until resolved)."""
        key = normalize_name(permission)
        if key not in self.capabilities:
            self.capabilities[key] = Capability(permission=key)
        return self.capabilities[key]

    def _fetch_role(self) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        user_id = self.session.user_id
        if self.session.token and user_id is not None:
            try:
                return self.api.role_for_user(user_id), 'server'
            except APIError as e:
                logger.warning('Role refresh failed (%s: %s); using sign-in cache', e.kind, e.message)
        # Read after the fetch: a 401 has already invalidated the session and emptied the cache
        cached = self.session.cached_role
        if cached is not None:
            return cached, 'cache'
        return None, None

    def resolve(self, *permissions: str) -> Dict[str, Capability]:
        """Resolve the given capabilities with a single role fetch."""
        caps = [self.capability(p) for p in permissions]
        for cap in caps:
            cap._move(CapabilityState.LOADING)
        role, source = self._fetch_role()
        for cap in caps:
            cap.source = source
            allowed = role_has_permission(role, cap.permission)
            cap._move(CapabilityState.ALLOWED if allowed else CapabilityState.DENIED)
        return {cap.permission: cap for cap in caps}

    def has_permission(self, permission: str) -> bool:
        return self.resolve(permission)[normalize_name(permission)].allowed

    def is_allowed(self, permission: str) -> bool:
        """Current answer without fetching; False while idle or loading."""
        return self.capability(permission).allowed


# --- UI gating helpers ---

@dataclass
class NavItem:
    name: str
    href: Optional[str] = None
    permission: Optional[str] = None
    children: List['NavItem'] = field(default_factory=list)


DEFAULT_NAVIGATION: List[NavItem] = [
    NavItem('Dashboard', '/dashboard'),
    NavItem('Users', permission='view_users', children=[
        NavItem('All Users', '/dashboard/users', 'view_users'),
        NavItem('Only Users', '/dashboard/users/allusers', 'view_users'),
        NavItem('Only Admins', '/dashboard/users/alladmins', 'view_users'),
        NavItem('Only Staff', '/dashboard/users/allstaff', 'view_users'),
    ]),
    NavItem('All Roles', '/dashboard/allroles', 'view_roles'),
    NavItem('All Permissions', '/dashboard/allpermissions', 'view_permissions'),
    NavItem('Export Orders', '/dashboard/exportorders', 'export_orders'),
    NavItem('Reports', '/dashboard/reports'),
    NavItem('Settings', '/dashboard/settings'),
]


def _gated_names(items: Iterable[NavItem]) -> List[str]:
    names: List[str] = []
    for item in items:
        if item.permission:
            names.append(item.permission)
        names.extend(_gated_names(item.children))
    return names


def visible_nav_items(resolver: CapabilityResolver, items: Optional[List[NavItem]] = None) -> List[NavItem]:
    """Navigation entries whose permission (if any) resolves as allowed."""
    items = DEFAULT_NAVIGATION if items is None else items
    gated = _gated_names(items)
    caps = resolver.resolve(*gated) if gated else {}

    def keep(item: NavItem) -> bool:
        return not item.permission or caps[normalize_name(item.permission)].allowed

    out: List[NavItem] = []
    for item in items:
        if not keep(item):
            continue
        children = [c for c in item.children if keep(c)]
        out.append(NavItem(item.name, item.href, item.permission, children))
    return out


def can_delete_role(role: Dict[str, Any]) -> bool:
    return normalize_name(role.get('name')) not in PROTECTED_ROLES


def can_edit_role(role: Dict[str, Any]) -> bool:
    return normalize_name(role.get('name')) not in PROTECTED_ROLES


def can_delete_permission(permission: Dict[str, Any]) -> bool:
    return normalize_name(permission.get('name')) not in PROTECTED_PERMISSIONS


def route_guard(session: SessionContext) -> str:
    """Where the console should send the current session: 'login', 'dashboard' or 'home'."""
    if not session.is_authenticated or session.token_expired():
        session.invalidate()
        return 'login'
    if role_has_name(session.cached_role, CONSOLE_ROLES):
        return 'dashboard'
    return 'home'
