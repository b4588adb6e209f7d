from datetime import datetime
from flask import Blueprint, request
from models import db
from models.coupon import Coupon
from utils.permissions import require_permission
from utils.validators import to_bool
from api.utils import success_response, error_response, validate_request_json

coupons = Blueprint('coupons', __name__, url_prefix='/admin/coupons')

def _parse_datetime(value):
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)

def _optional_number(value, cast=float):
    if value in (None, ''):
        return None
    return cast(value)

def apply_coupon_data(coupon, data):
    """Validate and copy coupon fields; returns an error message or None"""
    try:
        if 'code' in data:
            code = Coupon.normalize_code(data['code'])
            if not code:
                return "Coupon code is required"
            existing = Coupon.query.filter_by(code=code).first()
            if existing and existing.id != coupon.id:
                return "Coupon code already exists"
            coupon.code = code
        if 'discount_type' in data:
            if data['discount_type'] not in Coupon.DISCOUNT_TYPES:
                return "Discount type must be percentage or fixed"
            coupon.discount_type = data['discount_type']
        if 'discount_value' in data:
            value = float(data['discount_value'])
            if value <= 0:
                return "Discount value must be greater than 0"
            coupon.discount_value = value
        if 'min_order_amount' in data:
            coupon.min_order_amount = _optional_number(data['min_order_amount'])
        if 'max_discount_amount' in data:
            coupon.max_discount_amount = _optional_number(data['max_discount_amount'])
        if 'usage_limit' in data:
            coupon.usage_limit = _optional_number(data['usage_limit'], int)
        if 'starts_at' in data:
            coupon.starts_at = _parse_datetime(data['starts_at'])
        if 'expires_at' in data:
            coupon.expires_at = _parse_datetime(data['expires_at'])
        if 'is_active' in data:
            coupon.is_active = to_bool(data['is_active'])
    except (TypeError, ValueError):
        return "Invalid coupon data"

    if coupon.discount_type == 'percentage' and coupon.discount_value and float(coupon.discount_value) > 100:
        return "Percentage discount cannot exceed 100"
    if coupon.starts_at and coupon.expires_at and coupon.expires_at <= coupon.starts_at:
        return "Expiry must be after the start date"
    return None

@coupons.route('', methods=['GET'])
@require_permission('marketing')
def list_coupons():
    search = request.args.get('search', '').strip()
    query = Coupon.query
    if search:
        query = query.filter(Coupon.code.ilike(f'%{search}%'))
    items = query.order_by(Coupon.created_at.desc()).all()
    return success_response({"coupons": [coupon.to_dict() for coupon in items]})

@coupons.route('', methods=['POST'])
@require_permission('marketing')
@validate_request_json(['code', 'discount_type', 'discount_value'])
def create_coupon():
    coupon = Coupon(usage_count=0, is_active=True)
    error = apply_coupon_data(coupon, request.get_json())
    if error:
        return error_response(error, "VALIDATION_ERROR", 400)
    db.session.add(coupon)
    db.session.commit()
    return success_response({"coupon": coupon.to_dict()}, "Coupon created successfully", 201)

@coupons.route('/<int:coupon_id>', methods=['PUT'])
@require_permission('marketing')
@validate_request_json()
def update_coupon(coupon_id):
    coupon = db.session.get(Coupon, coupon_id)
    if not coupon:
        return error_response("Coupon not found", "NOT_FOUND", 404)
    error = apply_coupon_data(coupon, request.get_json())
    if error:
        db.session.rollback()
        return error_response(error, "VALIDATION_ERROR", 400)
    db.session.commit()
    return success_response({"coupon": coupon.to_dict()}, "Coupon updated successfully")

@coupons.route('/<int:coupon_id>/toggle', methods=['POST'])
@require_permission('marketing')
def toggle_coupon(coupon_id):
    coupon = db.session.get(Coupon, coupon_id)
    if not coupon:
        return error_response("Coupon not found", "NOT_FOUND", 404)
    coupon.is_active = not coupon.is_active
    db.session.commit()
    return success_response({"coupon": coupon.to_dict()},
                            f"Coupon {'activated' if coupon.is_active else 'deactivated'}")

@coupons.route('/<int:coupon_id>', methods=['DELETE'])
@require_permission('marketing')
def delete_coupon(coupon_id):
    coupon = db.session.get(Coupon, coupon_id)
    if not coupon:
        return error_response("Coupon not found", "NOT_FOUND", 404)
    db.session.delete(coupon)
    db.session.commit()
    return success_response(message="Coupon deleted successfully")
