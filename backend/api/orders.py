import re
from flask import Blueprint, request
from models.order import Order
from api.utils import success_response, error_response

orders_bp = Blueprint('orders', __name__)

STATUS_LABELS = {
    'pending': 'Order Placed',
    'processing': 'Processing',
    'confirmed': 'Confirmed',
    'shipped': 'Shipped',
    'delivered': 'Delivered',
    'cancelled': 'Cancelled',
    'returned': 'Returned',
}

TIMELINE = ('pending', 'processing', 'shipped', 'delivered')

def status_timeline(order):
    """Steps shown on the tracking page, completed up to the current status"""
    if order.status in ('cancelled', 'returned'):
        steps = ['pending', order.status]
    else:
        steps = list(TIMELINE)
    current = order.status if order.status in steps else 'processing'
    reached = steps.index(current)
    return [
        {'status': step, 'label': STATUS_LABELS[step], 'completed': index <= reached}
        for index, step in enumerate(steps)
    ]

@orders_bp.route('/track', methods=['GET'])
def track_order():
    """Public order lookup by order number plus the phone used to order"""
    order_number = (request.args.get('order_number') or '').strip().upper()
    phone = re.sub(r'\s+', '', request.args.get('phone') or '')
    if not order_number or not phone:
        return error_response("Order number and phone are required", "MISSING_FIELDS", 400)

    order = Order.query.filter_by(order_number=order_number).first()
    if not order or order.shipping_phone[-10:] != phone[-10:]:
        return error_response("Order not found", "NOT_FOUND", 404)

    return success_response({
        "order_number": order.order_number,
        "status": order.status,
        "status_label": STATUS_LABELS.get(order.status, order.status),
        "tracking_number": order.tracking_number,
        "total": float(order.total),
        "items": [item.to_dict() for item in order.items],
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "timeline": status_timeline(order),
    })
