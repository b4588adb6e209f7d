import logging
import requests
from flask import current_app

from models import db
from utils.exceptions import CourierError, IntegrationNotConfigured

logger = logging.getLogger(__name__)

BOOKABLE_STATUSES = ('pending', 'processing', 'confirmed')
REQUIRED_FIELDS = ('invoice', 'recipient_name', 'recipient_phone', 'recipient_address', 'cod_amount')


class SteadfastService:
    """
    Steadfast courier consignment booking.
    Credentials come from STEADFAST_API_KEY / STEADFAST_SECRET_KEY.
    """

    @staticmethod
    def _credentials():
        api_key = current_app.config.get('STEADFAST_API_KEY')
        secret_key = current_app.config.get('STEADFAST_SECRET_KEY')
        if not api_key or not secret_key:
            raise IntegrationNotConfigured("Steadfast API credentials not configured")
        return api_key, secret_key

    @staticmethod
    def create_order(payload):
        """
        POST one consignment. Returns {consignment_id, tracking_code, message}
        or raises CourierError with Steadfast's message and field errors.
        """
        missing = [field for field in REQUIRED_FIELDS if payload.get(field) in (None, '')]
        if missing:
            raise CourierError(f"Missing required fields: {', '.join(missing)}", "MISSING_FIELDS")

        api_key, secret_key = SteadfastService._credentials()
        url = f"{current_app.config['STEADFAST_BASE_URL']}/create_order"
        body = {
            'invoice': payload['invoice'],
            'recipient_name': payload['recipient_name'],
            'recipient_phone': payload['recipient_phone'],
            'recipient_address': payload['recipient_address'],
            'cod_amount': payload['cod_amount'],
            'note': payload.get('note') or '',
        }
        headers = {
            'Api-Key': api_key,
            'Secret-Key': secret_key,
            'Content-Type': 'application/json',
        }

        try:
            response = requests.post(url, json=body, headers=headers,
                                     timeout=current_app.config['STEADFAST_TIMEOUT'])
        except requests.RequestException as e:
            logger.error(f"Steadfast request failed for {payload['invoice']}: {e}")
            raise CourierError("Could not reach Steadfast", "COURIER_UNREACHABLE", 502)

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok or data.get('status') != 200:
            logger.error(f"Steadfast API error: {response.status_code} - {response.text}")
            raise CourierError(
                data.get('message') or "Failed to create order in Steadfast",
                details=data.get('errors')
            )

        consignment = data.get('consignment') or {}
        return {
            'consignment_id': consignment.get('consignment_id'),
            'tracking_code': consignment.get('tracking_code'),
            'message': data.get('message') or 'Order sent to Steadfast successfully',
        }

    @staticmethod
    def build_payload(order):
        """Consignment fields for a stored order"""
        if order.notes:
            note = order.notes
        else:
            note = 'Order items: ' + ', '.join(
                f"{item.product_name} x{item.quantity}" for item in order.items
            )
        return {
            'invoice': order.order_number,
            'recipient_name': order.shipping_name,
            'recipient_phone': order.shipping_phone,
            'recipient_address': order.shipping_address_line,
            'cod_amount': float(order.total) if order.payment_method == 'cod' else 0,
            'note': note,
        }

    @staticmethod
    def book_order(order):
        """Send one order and record the tracking code on success"""
        if order.tracking_number:
            raise CourierError(f"Order {order.order_number} already has tracking number {order.tracking_number}",
                               "ALREADY_BOOKED")
        if order.status not in BOOKABLE_STATUSES:
            raise CourierError(f"Order {order.order_number} is {order.status} and cannot be shipped",
                               "INVALID_STATUS")

        previous_status = order.status
        result = SteadfastService.create_order(SteadfastService.build_payload(order))

        order.tracking_number = str(result['tracking_code'] or result['consignment_id'] or '') or None
        order.consignment_id = str(result['consignment_id']) if result['consignment_id'] else None
        if order.status == 'pending':
            order.status = 'processing'
        db.session.commit()

        logger.info(f"Order {order.order_number} booked with Steadfast, tracking {order.tracking_number}")
        return dict(result, order_id=order.id, order_number=order.order_number,
                    tracking_number=order.tracking_number, status_changed=order.status != previous_status)

    @staticmethod
    def book_orders(orders):
        """
        Book several orders one after another. Failures are reported per
        order and do not stop the batch.
        """
        results = []
        for order in orders:
            try:
                result = SteadfastService.book_order(order)
                results.append(dict(result, success=True))
            except (CourierError, IntegrationNotConfigured) as e:
                db.session.rollback()
                results.append({
                    'success': False,
                    'order_id': order.id,
                    'order_number': order.order_number,
                    'error': e.message,
                    'errors': e.details,
                })

        success_count = sum(1 for result in results if result['success'])
        return {
            'results': results,
            'success_count': success_count,
            'failure_count': len(results) - success_count,
        }
