import logging
import re
import requests
from flask import current_app

from models import db
from models.setting import Setting
from models.sms import SmsTemplate, SmsLog

logger = logging.getLogger(__name__)

SETTINGS_CATEGORY = 'sms'
PLACEHOLDER = re.compile(r'\{(\w+)\}')

DEFAULT_TEMPLATES = {
    'order_placed': ('Order placed', 'Dear {name}, your order {order_number} of ৳{total} has been placed. Thank you!'),
    'order_processing': ('Order processing', 'Your order {order_number} is being processed. Tracking: {tracking_number}'),
    'order_shipped': ('Order shipped', 'Your order {order_number} has been shipped. Tracking: {tracking_number}'),
    'order_delivered': ('Order delivered', 'Your order {order_number} has been delivered. Thank you for shopping with us!'),
    'order_cancelled': ('Order cancelled', 'Your order {order_number} has been cancelled.'),
}


def render_message(body, context):
    """Replace {placeholders}; unknown ones are left as written"""
    def replace(match):
        value = context.get(match.group(1))
        return match.group(0) if value is None else str(value)
    return PLACEHOLDER.sub(replace, body or '')


def order_context(order):
    total = float(order.total or 0)
    return {
        'name': order.shipping_name,
        'order_number': order.order_number,
        'total': f'{total:g}',
        'tracking_number': order.tracking_number or '',
        'status': order.status,
        'phone': order.shipping_phone,
    }


def get_settings():
    return {
        'sms_enabled': Setting.get('sms_enabled', False),
        'sms_api_url': Setting.get('sms_api_url', current_app.config['SMS_API_URL']),
        'sms_api_key_set': bool(Setting.get('sms_api_key')),
        'sms_sender_id': Setting.get('sms_sender_id', ''),
    }


def save_settings(data):
    if 'sms_enabled' in data:
        Setting.set('sms_enabled', bool(data.get('sms_enabled')), 'boolean', SETTINGS_CATEGORY, commit=False)
    if 'sms_api_url' in data:
        Setting.set('sms_api_url', (data.get('sms_api_url') or '').strip(), 'string', SETTINGS_CATEGORY, commit=False)
    if data.get('sms_api_key'):
        Setting.set('sms_api_key', data['sms_api_key'].strip(), 'string', SETTINGS_CATEGORY, commit=False)
    if 'sms_sender_id' in data:
        Setting.set('sms_sender_id', (data.get('sms_sender_id') or '').strip(), 'string', SETTINGS_CATEGORY, commit=False)
    db.session.commit()
    return get_settings()


def ensure_default_templates():
    """Create the stock templates once; admins edit them afterwards"""
    existing = {template.event for template in SmsTemplate.query.all()}
    for event, (name, body) in DEFAULT_TEMPLATES.items():
        if event not in existing:
            db.session.add(SmsTemplate(name=name, event=event, body=body, is_active=True))
    db.session.commit()


def send_sms(phone, message, event=None, order_id=None):
    """
    Send one message through the configured gateway and log the attempt.
    Returns True on success. Gateway failures are logged, never raised.
    """
    api_key = Setting.get('sms_api_key')
    if not Setting.get('sms_enabled', False) or not api_key:
        logger.info(f"SMS disabled, not sending {event or 'message'} to {phone}")
        return False

    url = Setting.get('sms_api_url', current_app.config['SMS_API_URL'])
    params = {
        'api_key': api_key,
        'senderid': Setting.get('sms_sender_id', ''),
        'number': phone,
        'message': message,
    }

    success = False
    response_text = None
    try:
        response = requests.post(url, data=params, timeout=current_app.config['SMS_TIMEOUT'])
        response_text = response.text[:1000]
        success = response.ok
        if not success:
            logger.error(f"SMS gateway error: {response.status_code} - {response.text}")
    except requests.RequestException as e:
        response_text = str(e)
        logger.error(f"SMS request failed for {phone}: {e}")

    db.session.add(SmsLog(
        phone=phone,
        message=message,
        event=event,
        order_id=order_id,
        success=success,
        response=response_text,
    ))
    db.session.commit()
    return success


def notify_order_event(order, event):
    """Send the active template for an order event, if there is one"""
    template = SmsTemplate.query.filter_by(event=event, is_active=True).first()
    if not template:
        return False
    message = render_message(template.body, order_context(order))
    return send_sms(order.shipping_phone, message, event=event, order_id=order.id)
