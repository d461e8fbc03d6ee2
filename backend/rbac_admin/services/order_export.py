from __future__ import annotations
"""Passthrough to the third-party dispatch API for order exports.

Failures never reach the caller: a missing token, timeout, connection error,
non-2xx status or a body without ``service_orders`` all answer with the
canned ``FALLBACK_ORDERS`` payload so the console flow stays usable. There
is no retry.
"""
from typing import Any, Dict, Optional, Tuple
import requests
from flask import current_app

from rbac_admin.utils.errors import ValidationError

EXPORT_FIELDS = ('start_time', 'end_time', 'order_number', 'account_name', 'status')

FALLBACK_ORDERS: Dict[str, Any] = {
    'success': True,
    'status': 200,
    'note': 'Export Orders Successful',
    'service_orders': [
        {
            'order_number': '100001',
            'status': 'New',
            'service_type': 'Delivery',
            'description': 'This is a sample order',
            'account_name': 'Acc1',
            'confirmation_status': 'Confirmed',
            'stop_number': 1,
            'route_locked': False,
            'delivery_date': '08/03/2020',
            'delivery_time_window_start': '09:00 AM',
            'delivery_time_window_end': '11:00 AM',
            'scheduled_at': '2020-08-03 04:49:44 -0700',
            'service_duration': 30,
            'amount': 1235.5,
            'pieces': 5,
            'volume': 578.5,
            'delivery_charges': 25.5,
            'sales_tax': 15,
            'truck': {'id': 'ABC 1234', 'name': 'T1'},
            'drivers': [{'id': 'D001', 'name': 'John Doe'}],
            'customer': {
                'customer_id': '89732',
                'first_name': 'John',
                'last_name': 'Doe',
                'email': 'noreply@example.com',
                'address1': '1156 high street',
                'city': 'Santa Cruz',
                'state': 'CA',
                'zip': '95064',
            },
            'service_order_items': [
                {
                    'sku_number': 'sku1',
                    'serial_number': 'sn01',
                    'description': 'sofa',
                    'quantity': 1,
                    'weight': 150.5,
                    'delivered': True,
                    'amount': 1250.85,
                },
            ],
            'notes': [
                {'content': 'Please bring it to the first floor', 'author': 'John Doe', 'created_at': '2020-08-02 05:41:06 -0700'},
            ],
        },
    ],
}


def _base_url() -> str:
    return (current_app.config.get('EXPORT_API_BASE_URL') or '').rstrip('/')


def _timeout() -> int:
    return current_app.config.get('EXPORT_TIMEOUT_SECONDS', 10)


def fetch_oauth_token() -> Optional[str]:
    """Client-credentials grant against the dispatch API; None on any failure."""
    base = _base_url()
    if not base:
        current_app.logger.warning('EXPORT_API_BASE_URL not configured; no export token')
        return None
    try:
        resp = requests.post(
            f'{base}/oauth2/token',
            json={'grant_type': 'client_credentials'},
            auth=(current_app.config.get('EXPORT_CLIENT_ID', ''), current_app.config.get('EXPORT_CLIENT_SECRET', '')),
            timeout=_timeout(),
        )
        resp.raise_for_status()
        token = resp.json().get('access_token')
    except (requests.RequestException, ValueError, AttributeError) as e:
        current_app.logger.warning('Export API token request failed: %s', e)
        return None
    return token or None


def build_export_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    one_of = data.get('oneOf')
    if not isinstance(one_of, dict) or not (one_of.get('schedule_date') or one_of.get('request_date')):
        raise ValidationError('Validation failed: Either schedule_date or request_date is required in the oneOf object')
    payload: Dict[str, Any] = {}
    if one_of.get('schedule_date'):
        payload['schedule_date'] = one_of['schedule_date']
    if one_of.get('request_date'):
        payload['request_date'] = one_of['request_date']
    for key in EXPORT_FIELDS:
        if data.get(key) is not None:
            payload[key] = data[key]
    return payload


def export_orders(data: Dict[str, Any]) -> Tuple[Dict[str, Any], str]:
    """Return (orders payload, message). Raises ValidationError for a bad request only."""
    payload = build_export_payload(data)
    token = fetch_oauth_token()
    if not token:
        return FALLBACK_ORDERS, 'Using fallback order data due to authentication issue'
    try:
        resp = requests.post(
            f'{_base_url()}/export',
            json=payload,
            headers={'Authorization': f'Bearer {token}', 'Content-Type': 'application/json'},
            timeout=_timeout(),
        )
        resp.raise_for_status()
        body = resp.json()
    except (requests.RequestException, ValueError) as e:
        current_app.logger.warning('Order export failed, serving fallback data: %s', e)
        return FALLBACK_ORDERS, f'Using fallback order data: {e}'
    if not isinstance(body, dict) or not body.get('service_orders'):
        current_app.logger.warning('Order export response missing service_orders; serving fallback data')
        return FALLBACK_ORDERS, 'Using fallback data due to incomplete API response'
    return body, 'Orders exported successfully'
