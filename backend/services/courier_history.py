import logging
import re
import requests
from flask import current_app

from utils.exceptions import CourierError, IntegrationNotConfigured, ValidationError

logger = logging.getLogger(__name__)

COURIERS = ('steadfast', 'pathao', 'redx', 'paperfly')

BLOCKED_MESSAGE = ("Courier history service is blocking automated requests right now. "
                   "Please try again later.")


def normalize_phone(phone):
    """Local 11-digit form: digits only, 88 country code dropped, leading 0"""
    digits = re.sub(r'\D', '', phone or '')
    if digits.startswith('88'):
        digits = digits[2:]
    if len(digits) == 10:
        digits = '0' + digits
    return digits


def risk_level(success_ratio):
    if success_ratio is None:
        return 'Unknown'
    ratio = float(success_ratio)
    if ratio >= 80:
        return 'Low'
    if ratio >= 50:
        return 'Medium'
    return 'High'


def _ratio(success, total):
    if not total:
        return None
    return round(success / total * 100, 1)


def courier_breakdown(data):
    """Per-courier totals and success rate from the aggregator's summary"""
    breakdown = {}
    for courier in COURIERS:
        entry = data.get(courier) or {}
        total = int(entry.get('total_parcel') or 0)
        success = int(entry.get('success_parcel') or 0)
        breakdown[courier] = {
            'total_parcel': total,
            'success_parcel': success,
            'cancelled_parcel': int(entry.get('cancelled_parcel') or entry.get('cancel_parcel') or 0),
            'success_ratio': _ratio(success, total),
        }
    return breakdown


def summarize(data):
    """Overall numbers plus risk level for the admin view"""
    summary = data.get('summary') or data
    total = int(summary.get('total_parcel') or 0)
    success = int(summary.get('success_parcel') or 0)
    ratio = summary.get('success_ratio')
    if ratio is None:
        ratio = _ratio(success, total)
    return {
        'total_parcel': total,
        'success_parcel': success,
        'cancelled_parcel': int(summary.get('cancelled_parcel') or summary.get('cancel_parcel') or 0),
        'success_ratio': ratio,
        'risk_level': risk_level(ratio),
        'couriers': courier_breakdown(data.get('courierData') or data),
    }


def check_phone(phone):
    """
    Look up a customer's delivery history across couriers.

    Returns {'success': True, 'data': ...} or, when the aggregator blocks us
    or times out, {'success': False, 'blocked': True, 'message': ...}.
    Other upstream failures raise CourierError.
    """
    if not phone:
        raise ValidationError("Phone number is required", "MISSING_FIELDS")

    api_key = current_app.config.get('BDCOURIER_API_KEY')
    if not api_key:
        raise IntegrationNotConfigured("Courier history API key not configured")

    cleaned = normalize_phone(phone)
    url = f"{current_app.config['BDCOURIER_BASE_URL']}/courier-check"

    try:
        response = requests.get(
            url,
            params={'phone': cleaned},
            headers={
                'Authorization': f'Bearer {api_key}',
                'Accept': 'application/json',
            },
            timeout=current_app.config['BDCOURIER_TIMEOUT']
        )
    except requests.Timeout:
        logger.warning(f"Courier history lookup timed out for {cleaned}")
        return {'success': False, 'blocked': True, 'message': BLOCKED_MESSAGE}
    except requests.RequestException as e:
        logger.error(f"Courier history request failed: {e}")
        raise CourierError("Failed to fetch courier history", "COURIER_UNREACHABLE", 502)

    if response.status_code == 403 and 'challenge-platform' in response.text:
        logger.warning("Courier history lookup blocked by bot protection")
        return {'success': False, 'blocked': True, 'message': BLOCKED_MESSAGE}

    if not response.ok:
        logger.error(f"Courier history API error: {response.status_code} - {response.text[:500]}")
        raise CourierError(
            "Failed to fetch courier history",
            "COURIER_HISTORY_ERROR",
            response.status_code if 400 <= response.status_code < 600 else 502,
            details={'status': response.status_code}
        )

    try:
        data = response.json()
    except ValueError:
        logger.error(f"Courier history returned invalid JSON: {response.text[:500]}")
        raise CourierError("Invalid response from courier history service", "INVALID_RESPONSE", 500)

    return {'success': True, 'phone': cleaned, 'data': data}
