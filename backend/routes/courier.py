from flask import Blueprint, request, jsonify
from models import db
from models.order import Order
from services import courier_history
from services.courier_service import SteadfastService
from utils.exceptions import ShopError
from utils.permissions import require_permission
from api.utils import success_response, error_response, validate_request_json

courier = Blueprint('courier', __name__, url_prefix='/admin/courier')

@courier.route('/steadfast', methods=['POST'])
@require_permission('orders')
@validate_request_json()
def steadfast():
    """
    Raw consignment booking. Body is either one consignment
    {order_id?, invoice, recipient_name, recipient_phone, recipient_address,
    cod_amount, note} or {orders: [consignment, ...]}.
    When order_id is given the order's tracking number is stored.
    """
    data = request.get_json()

    if isinstance(data.get('orders'), list):
        results = [_book_payload(payload) for payload in data['orders']]
        success_count = sum(1 for result in results if result['success'])
        return success_response({
            'results': results,
            'success_count': success_count,
            'failure_count': len(results) - success_count,
        })

    result = _book_payload(data)
    if not result['success']:
        return error_response(result['error'], result.get('code'), 400, details=result.get('errors'))
    return success_response(result, result['message'])

def _book_payload(payload):
    try:
        order = db.session.get(Order, payload['order_id']) if payload.get('order_id') else None
        if order is not None:
            result = SteadfastService.book_order(order)
        else:
            result = SteadfastService.create_order(payload)
        return dict(result, success=True)
    except ShopError as e:
        db.session.rollback()
        return {
            'success': False,
            'invoice': payload.get('invoice'),
            'error': e.message,
            'code': e.code,
            'errors': e.details,
        }

@courier.route('/history', methods=['GET', 'POST'])
@require_permission('orders')
def history():
    """Customer delivery record across couriers, by phone"""
    if request.method == 'POST':
        phone = (request.get_json(force=True, silent=True) or {}).get('phone')
    else:
        phone = request.args.get('phone')

    result = courier_history.check_phone(phone)
    if not result['success']:
        return jsonify(result), 200

    data = result['data']
    payload = data.get('data') if isinstance(data.get('data'), dict) else data
    return success_response({
        'phone': result['phone'],
        'raw': data,
        'summary': courier_history.summarize(payload),
    })
