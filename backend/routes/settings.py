from flask import Blueprint, request, current_app
from models import db
from models.setting import Setting
from services import facebook_capi, sms_service
from utils.permissions import require_permission
from api.utils import success_response, error_response, validate_request_json

settings = Blueprint('settings', __name__, url_prefix='/admin/settings')

@settings.route('/marketing', methods=['GET'])
@require_permission('marketing')
def get_marketing():
    """Facebook Pixel and Conversions API settings"""
    return success_response(facebook_capi.get_settings())

@settings.route('/marketing', methods=['PUT'])
@require_permission('marketing')
@validate_request_json()
def update_marketing():
    return success_response(facebook_capi.save_settings(request.get_json()), "Marketing settings saved")

@settings.route('/sms', methods=['GET'])
@require_permission('sms')
def get_sms():
    return success_response(sms_service.get_settings())

@settings.route('/sms', methods=['PUT'])
@require_permission('sms')
@validate_request_json()
def update_sms():
    return success_response(sms_service.save_settings(request.get_json()), "SMS settings saved")

def shipping_settings():
    config = current_app.config
    return {
        'free_shipping_threshold': Setting.get('free_shipping_threshold', config['FREE_SHIPPING_THRESHOLD']),
        'flat_shipping_fee': Setting.get('flat_shipping_fee', config['FLAT_SHIPPING_FEE']),
        'zone_fees': {
            zone: Setting.get(f'shipping_fee_{zone}', fee)
            for zone, fee in config['SHIPPING_ZONE_FEES'].items()
        },
    }

@settings.route('/shipping', methods=['GET'])
@require_permission('settings')
def get_shipping():
    return success_response(shipping_settings())

@settings.route('/shipping', methods=['PUT'])
@require_permission('settings')
@validate_request_json()
def update_shipping():
    """Override the configured shipping fees at runtime"""
    data = request.get_json()
    values = {}
    for key in ('free_shipping_threshold', 'flat_shipping_fee'):
        if key in data:
            values[key] = data[key]
    for zone, fee in (data.get('zone_fees') or {}).items():
        if zone not in current_app.config['SHIPPING_ZONE_FEES']:
            return error_response(f"Unknown shipping zone: {zone}", "VALIDATION_ERROR", 400)
        values[f'shipping_fee_{zone}'] = fee

    for key, value in values.items():
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return error_response(f"{key} must be a number", "VALIDATION_ERROR", 400)
        if amount < 0:
            return error_response(f"{key} cannot be negative", "VALIDATION_ERROR", 400)
        Setting.set(key, amount, 'number', 'shipping', commit=False)

    db.session.commit()
    return success_response(shipping_settings(), "Shipping settings saved")
