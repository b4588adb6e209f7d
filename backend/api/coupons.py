from flask import Blueprint, request
from models.coupon import Coupon
from api.utils import success_response, error_response, validate_request_json

coupons_bp = Blueprint('coupons', __name__)

@coupons_bp.route('/validate', methods=['POST'])
@validate_request_json(['code'])
def validate_coupon():
    """
    Check a code against a cart total before checkout.
    Body: {code, order_total}
    """
    data = request.get_json()
    code = Coupon.normalize_code(data.get('code'))
    if not code:
        return error_response("Coupon code is required", "MISSING_CODE", 400)

    try:
        order_total = float(data.get('order_total') or 0)
    except (TypeError, ValueError):
        return error_response("Invalid order total", "INVALID_TOTAL", 400)

    coupon = Coupon.query.filter_by(code=code).first()
    if coupon is None:
        return error_response("Invalid coupon code", "INVALID_COUPON", 404)

    ok, reason = coupon.is_valid(order_total=order_total)
    if not ok:
        return error_response(reason, "COUPON_INVALID", 400)

    discount = coupon.calculate_discount(order_total)
    data = coupon.to_dict()
    data.update({
        "valid": True,
        "discount_amount": discount,
        "original_total": order_total,
        "final_total": round(order_total - discount, 2),
    })
    return success_response(data)
