import hashlib
import logging
import re
import time
import requests
from flask import current_app

from models import db
from models.setting import Setting

logger = logging.getLogger(__name__)

SETTINGS_CATEGORY = 'marketing'

USER_FIELDS = {
    'email': 'em',
    'phone': 'ph',
    'first_name': 'fn',
    'last_name': 'ln',
}


def hash_value(value):
    """SHA-256 hex digest of the lower-cased, trimmed value"""
    return hashlib.sha256(str(value).strip().lower().encode('utf-8')).hexdigest()


def hash_user_data(user_data):
    """Hash customer identifiers the way the Conversions API expects"""
    hashed = {}
    for field, key in USER_FIELDS.items():
        value = (user_data or {}).get(field)
        if not value:
            continue
        if field == 'phone':
            value = re.sub(r'\D', '', str(value))
            if not value:
                continue
        hashed[key] = [hash_value(value)]
    return hashed


def pixel_config():
    """Public pixel settings for the storefront script"""
    pixel_id = Setting.get('fb_pixel_id')
    enabled = Setting.get('fb_pixel_enabled', False)
    return {
        'pixel_id': pixel_id if enabled else None,
        'enabled': bool(enabled and pixel_id),
    }


def get_settings():
    """Admin view; the access token is never echoed back in full"""
    token = Setting.get('fb_capi_token')
    return {
        'fb_pixel_id': Setting.get('fb_pixel_id', ''),
        'fb_pixel_enabled': Setting.get('fb_pixel_enabled', False),
        'fb_capi_enabled': Setting.get('fb_capi_enabled', True),
        'fb_capi_token_set': bool(token),
        'fb_test_event_code': Setting.get('fb_test_event_code', ''),
    }


def save_settings(data):
    if 'fb_pixel_id' in data:
        Setting.set('fb_pixel_id', (data.get('fb_pixel_id') or '').strip(), 'string', SETTINGS_CATEGORY, commit=False)
    if 'fb_pixel_enabled' in data:
        Setting.set('fb_pixel_enabled', bool(data.get('fb_pixel_enabled')), 'boolean', SETTINGS_CATEGORY, commit=False)
    if data.get('fb_capi_token'):
        Setting.set('fb_capi_token', data['fb_capi_token'].strip(), 'string', SETTINGS_CATEGORY, commit=False)
    if 'fb_capi_enabled' in data:
        Setting.set('fb_capi_enabled', bool(data.get('fb_capi_enabled')), 'boolean', SETTINGS_CATEGORY, commit=False)
    if 'fb_test_event_code' in data:
        Setting.set('fb_test_event_code', (data.get('fb_test_event_code') or '').strip(), 'string',
                    SETTINGS_CATEGORY, commit=False)
    db.session.commit()
    return get_settings()


def client_ip_from_headers(headers, remote_addr=None):
    forwarded = headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return headers.get('CF-Connecting-IP') or remote_addr


def build_event(event_name, user_data=None, custom_data=None, event_source_url=None,
                client_ip=None, user_agent=None, event_id=None, event_time=None):
    hashed = hash_user_data(user_data)
    if client_ip:
        hashed['client_ip_address'] = client_ip
    if user_agent:
        hashed['client_user_agent'] = user_agent

    event = {
        'event_name': event_name,
        'event_time': int(event_time or time.time()),
        'action_source': 'website',
        'user_data': hashed,
        'custom_data': custom_data or {},
    }
    if event_source_url:
        event['event_source_url'] = event_source_url
    if event_id:
        event['event_id'] = event_id
    return event


def send_event(event_name, user_data=None, custom_data=None, event_source_url=None,
               client_ip=None, user_agent=None, event_id=None):
    """
    Forward one server-side event. Never raises: the outcome is returned as
    {'success': bool, ...} so tracking can't break checkout.
    """
    pixel_id = Setting.get('fb_pixel_id')
    token = Setting.get('fb_capi_token')
    enabled = Setting.get('fb_capi_enabled', True)
    if not pixel_id or not token or not enabled:
        return {'success': False, 'message': 'CAPI not configured'}

    payload = {
        'data': [build_event(event_name, user_data, custom_data, event_source_url,
                             client_ip, user_agent, event_id)],
    }
    test_code = Setting.get('fb_test_event_code')
    if test_code:
        payload['test_event_code'] = test_code

    url = f"{current_app.config['FACEBOOK_GRAPH_URL']}/{pixel_id}/events"
    try:
        response = requests.post(url, params={'access_token': token}, json=payload,
                                 timeout=current_app.config['FACEBOOK_TIMEOUT'])
    except requests.RequestException as e:
        logger.error(f"Facebook CAPI request failed: {e}")
        return {'success': False, 'error': str(e)}

    try:
        result = response.json()
    except ValueError:
        result = {'raw': response.text}

    if not response.ok:
        logger.error(f"Facebook CAPI error: {response.status_code} - {response.text}")
        return {'success': False, 'error': result}

    return {'success': True, 'result': result}


def purchase_custom_data(order):
    return {
        'currency': 'BDT',
        'value': float(order.total),
        'order_id': order.order_number,
        'content_type': 'product',
        'content_ids': [item.product_id for item in order.items if item.product_id],
        'num_items': sum(item.quantity for item in order.items),
    }
