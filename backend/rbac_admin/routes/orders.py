from flask import Blueprint, request
from rbac_admin.constants.permissions import CONSOLE_ROLES
from rbac_admin.decorators.auth import require_permission, require_roles
from rbac_admin.services import order_export
from rbac_admin.utils.errors import Unexpected
from rbac_admin.utils.responses import success_response
from rbac_admin.utils.validation import json_body

orders_bp = Blueprint('orders', __name__)


@orders_bp.post('/export-orders')
@require_permission('export_orders')
def export_orders():
    orders, message = order_export.export_orders(json_body(request))
    return success_response(orders, message)


@orders_bp.get('/oauth2/token')
@require_roles(*CONSOLE_ROLES)
def oauth_token():
    token = order_export.fetch_oauth_token()
    if not token:
        raise Unexpected('Failed to authenticate with export API')
    return success_response({'access_token': token})
