"""
Console API client.

Talks to the admin API over HTTP, unwraps the response envelope and applies
the invalidate-on-401 rule to the injected SessionContext.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from rbac_admin.client.exceptions import APIError, AuthError, TransportError
from rbac_admin.client.session import SessionContext

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class AdminConsoleAPI:
    """
    Client for the RBAC admin API.

    Responsibilities:
    - Sign in and establish the session
    - Attach the bearer token to every request
    - Invalidate the session on any 401
    - Turn failure envelopes into APIError subclasses
    """

    def __init__(self, base_url: str, session: SessionContext, timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session
        self.timeout = timeout
        # Connection pooling across calls
        self.http = requests.Session()

    def close(self):
        if self.http is not None:
            self.http.close()

    def _request(self, method: str, endpoint: str, *, auth: bool = True, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop('headers', {})
        if auth:
            if not self.session.token:
                self.session.invalidate()
                raise AuthError('Not authenticated - sign in first', status=None)
            headers['Authorization'] = f'Bearer {self.session.token}'
        kwargs.setdefault('timeout', self.timeout)
        url = f'{self.base_url}{endpoint}'
        logger.debug('API request: %s %s', method, endpoint)
        try:
            response = self.http.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as e:
            logger.error('Request to %s failed: %s', url, e)
            raise TransportError(f'Request error: {e}')

        if response.status_code == 401:
            message = _message(response) or 'Authentication token expired or invalid'
            if auth:
                logger.warning('401 from %s %s; clearing session', method, endpoint)
                self.session.invalidate()
            raise AuthError(message, status=401)

        try:
            body = response.json()
        except ValueError:
            raise TransportError(f'Non-JSON response ({response.status_code}) from {endpoint}', status=response.status_code)
        if not isinstance(body, dict) or 'success' not in body:
            raise TransportError(f'Unexpected response shape from {endpoint}', status=response.status_code)
        if not body['success'] or response.status_code >= 400:
            raise APIError(body.get('message') or 'Request failed', kind=body.get('error'), status=response.status_code)
        return body.get('data') or {}

    # --- auth ---
    def signin(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request('POST', '/auth/signin', auth=False, json={'email': email, 'password': password})
        self.session.establish(data['token'], data['user'])
        logger.info('Signed in as %s', email)
        return data['user']

    def me(self) -> Dict[str, Any]:
        user = self._request('GET', '/auth/me')['user']
        self.session.update_user(user)
        return user

    def role_for_user(self, user_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/get-role-from-user-id/{user_id}')['role']

    # --- roles & permissions ---
    def list_roles(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/roles')['roles']

    def list_permissions(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/permissions')['permissions']

    def create_permission(self, name: str, description: str = '') -> Dict[str, Any]:
        return self._request('POST', '/permissions', json={'name': name, 'description': description})['permission']

    def create_role(self, name: str, description: str = '', permissions: Optional[List[str]] = None) -> Dict[str, Any]:
        payload = {'name': name, 'description': description, 'permissions': permissions or []}
        return self._request('POST', '/roles', json=payload)['role']

    def update_role(self, role_id: int, **fields: Any) -> Dict[str, Any]:
        return self._request('PUT', f'/roles/{role_id}', json=fields)['role']

    def delete_role(self, role_id: int) -> None:
        self._request('DELETE', f'/roles/{role_id}')

    def delete_permission(self, permission_id: int) -> None:
        self._request('DELETE', f'/permissions/{permission_id}')

    # --- dashboard ---
    def totals(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for endpoint in ('/total-users', '/total-staff', '/total-admins', '/total-roles', '/total-permissions'):
            out.update(self._request('GET', endpoint))
        return out

    def export_orders(self, **payload: Any) -> Dict[str, Any]:
        return self._request('POST', '/export-orders', json=payload)


def _message(response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get('message') if isinstance(body, dict) else None
