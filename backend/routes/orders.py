import logging
from flask import Blueprint, request
from sqlalchemy import or_
from models import db
from models.order import Order
from models.sms import SmsLog
from services import sms_service
from services.courier_service import SteadfastService
from services.order_lifecycle import ORDER_STATUSES, ALLOWED_ORDER_TRANSITIONS
from services.order_service import (place_order, order_summary, get_order_or_404, update_order_status,
                                    SHIPPING_POLICY_ZONE)
from utils.permissions import require_permission
from api.utils import success_response, error_response, validate_request_json, get_json_body, paginate_query

orders = Blueprint('orders', __name__, url_prefix='/admin/orders')

logger = logging.getLogger(__name__)

@orders.route('', methods=['GET'])
@require_permission('orders')
def list_orders():
    """Orders newest first. ?status=, ?source=, ?q= (order number, name or phone)"""
    query = Order.query
    status = request.args.get('status')
    if status and status != 'all':
        query = query.filter(Order.status == status)
    source = request.args.get('source')
    if source:
        query = query.filter(Order.order_source.like(f'{source}%'))
    search = (request.args.get('q') or '').strip()
    if search:
        like = f'%{search}%'
        query = query.filter(or_(
            Order.order_number.ilike(like),
            Order.shipping_name.ilike(like),
            Order.shipping_phone.ilike(like),
        ))

    items, pagination = paginate_query(query.order_by(Order.created_at.desc()))
    return success_response({
        "orders": [order.to_dict() for order in items],
        "pagination": pagination,
        "statuses": list(ORDER_STATUSES),
    })

@orders.route('/<order_id>', methods=['GET'])
@require_permission('orders')
def get_order(order_id):
    order = get_order_or_404(order_id)
    data = order.to_dict()
    data['allowed_statuses'] = sorted(ALLOWED_ORDER_TRANSITIONS.get(order.status, set()))
    return success_response({"order": data})

@orders.route('/<order_id>/status', methods=['PUT'])
@require_permission('orders')
@validate_request_json()
def update_status(order_id):
    """Body: {status?, tracking_number?}"""
    data = request.get_json()
    if not data.get('status') and 'tracking_number' not in data:
        return error_response("Nothing to update", "MISSING_FIELDS", 400)

    order = get_order_or_404(order_id)
    changed = update_order_status(order, data.get('status'), data.get('tracking_number'))
    if changed:
        sms_service.notify_order_event(order, f'order_{order.status}')

    return success_response({"order": order.to_dict()}, "Order updated successfully")

@orders.route('/manual', methods=['POST'])
@require_permission('orders')
def create_manual_order():
    """
    Order taken by phone or chat. Same body as checkout plus shipping_zone
    (inside_dhaka / outside_dhaka); shipping is the zone fee.
    """
    payload = get_json_body()
    order = place_order(payload, shipping_policy=SHIPPING_POLICY_ZONE, order_source='manual')
    sms_service.notify_order_event(order, 'order_placed')
    return success_response(order_summary(order), "Order created successfully", 201)

@orders.route('/<order_id>/courier', methods=['POST'])
@require_permission('orders')
def send_to_courier(order_id):
    """Book one order with Steadfast"""
    order = get_order_or_404(order_id)
    result = SteadfastService.book_order(order)
    if result['status_changed']:
        sms_service.notify_order_event(order, 'order_processing')
    return success_response(result, result['message'])

@orders.route('/courier/bulk', methods=['POST'])
@require_permission('orders')
@validate_request_json(['order_ids'])
def bulk_send_to_courier():
    """Body: {order_ids: [...]}; reports how many were sent and how many failed"""
    order_ids = request.get_json()['order_ids']
    if not isinstance(order_ids, list) or not order_ids:
        return error_response("Select at least one order", "VALIDATION_ERROR", 400)

    found = Order.query.filter(Order.id.in_(order_ids)).all()
    by_id = {order.id: order for order in found}
    missing = [order_id for order_id in order_ids if order_id not in by_id]

    outcome = SteadfastService.book_orders([by_id[order_id] for order_id in order_ids if order_id in by_id])
    for order_id in missing:
        outcome['results'].append({'success': False, 'order_id': order_id, 'error': 'Order not found'})
        outcome['failure_count'] += 1

    for result in outcome['results']:
        if result['success'] and result['status_changed']:
            sms_service.notify_order_event(by_id[result['order_id']], 'order_processing')

    message = f"Sent {outcome['success_count']} orders"
    if outcome['failure_count']:
        message += f", {outcome['failure_count']} failed"
    return success_response(outcome, message)

@orders.route('/<order_id>/invoice', methods=['GET'])
@require_permission('orders')
def invoice(order_id):
    """Data for the printable invoice"""
    order = get_order_or_404(order_id)
    data = order.to_dict()
    data['address_line'] = order.shipping_address_line
    data['cod_amount'] = float(order.total) if order.payment_method == 'cod' else 0
    return success_response({"invoice": data})

@orders.route('/<order_id>', methods=['DELETE'])
@require_permission('orders')
def delete_order(order_id):
    order = get_order_or_404(order_id)
    if order.status not in ('pending', 'cancelled'):
        return error_response("Only pending or cancelled orders can be deleted", "INVALID_STATUS", 400)
    SmsLog.query.filter_by(order_id=order.id).update({SmsLog.order_id: None})
    db.session.delete(order)
    db.session.commit()
    return success_response(message="Order deleted successfully")
