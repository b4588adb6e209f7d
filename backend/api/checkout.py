import logging
from flask import Blueprint, request
from api.utils import success_response, get_json_body
from api.cart import clear_session_cart
from services import facebook_capi, sms_service
from services.order_service import place_order, order_summary, SHIPPING_POLICY_THRESHOLD
from utils.auth import get_current_user

checkout_bp = Blueprint('checkout', __name__)

logger = logging.getLogger(__name__)

def track_purchase(order):
    """Server-side Purchase event; a tracking failure never fails checkout"""
    first_name, _, last_name = order.shipping_name.partition(' ')
    result = facebook_capi.send_event(
        'Purchase',
        user_data={'phone': order.shipping_phone, 'first_name': first_name, 'last_name': last_name},
        custom_data=facebook_capi.purchase_custom_data(order),
        event_source_url=request.headers.get('Referer'),
        client_ip=facebook_capi.client_ip_from_headers(request.headers, request.remote_addr),
        user_agent=request.headers.get('User-Agent'),
        event_id=order.order_number,
    )
    if not result.get('success') and result.get('error'):
        logger.warning(f"Purchase event for {order.order_number} not delivered: {result.get('error')}")

@checkout_bp.route('/place-order', methods=['POST'])
def create_order():
    """
    Place a storefront order.

    Body: {items: [{id, quantity} | {name, price, quantity, image}],
           shipping: {name, phone, street, city, district, postal_code},
           payment_method, notes, coupon_code}
    Prices for catalog items are read from the database; shipping uses the
    free-shipping threshold.
    """
    payload = get_json_body()
    user = get_current_user()
    order = place_order(
        payload,
        shipping_policy=SHIPPING_POLICY_THRESHOLD,
        order_source='website',
        user_id=user.id if user else None,
    )

    clear_session_cart()
    sms_service.notify_order_event(order, 'order_placed')
    track_purchase(order)

    return success_response(order_summary(order), "Order placed successfully", 201)
