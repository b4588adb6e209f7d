from flask import Blueprint, request
from models import db
from models.banner import Banner
from utils.permissions import require_permission
from utils.validators import to_bool
from api.utils import success_response, error_response, validate_request_json

banners = Blueprint('banners', __name__, url_prefix='/admin/banners')

@banners.route('', methods=['GET'])
@require_permission('marketing')
def list_banners():
    items = Banner.query.order_by(Banner.sort_order.asc()).all()
    return success_response({"banners": [banner.to_dict() for banner in items]})

def apply_banner_data(banner, data):
    for field in ('title', 'subtitle', 'image_url', 'link_url'):
        if field in data:
            setattr(banner, field, data[field])
    if 'is_active' in data:
        banner.is_active = to_bool(data['is_active'])
    if 'sort_order' in data:
        try:
            banner.sort_order = int(data['sort_order'] or 0)
        except (TypeError, ValueError):
            return "Sort order must be a number"
    return None

@banners.route('', methods=['POST'])
@require_permission('marketing')
@validate_request_json(['title', 'image_url'])
def create_banner():
    data = request.get_json()
    banner = Banner(is_active=True, sort_order=Banner.query.count())
    error = apply_banner_data(banner, data)
    if error:
        return error_response(error, "VALIDATION_ERROR", 400)
    db.session.add(banner)
    db.session.commit()
    return success_response({"banner": banner.to_dict()}, "Banner created successfully", 201)

@banners.route('/<banner_id>', methods=['PUT'])
@require_permission('marketing')
@validate_request_json()
def update_banner(banner_id):
    banner = db.session.get(Banner, banner_id)
    if not banner:
        return error_response("Banner not found", "NOT_FOUND", 404)
    error = apply_banner_data(banner, request.get_json())
    if error:
        db.session.rollback()
        return error_response(error, "VALIDATION_ERROR", 400)
    db.session.commit()
    return success_response({"banner": banner.to_dict()}, "Banner updated successfully")

@banners.route('/<banner_id>', methods=['DELETE'])
@require_permission('marketing')
def delete_banner(banner_id):
    banner = db.session.get(Banner, banner_id)
    if not banner:
        return error_response("Banner not found", "NOT_FOUND", 404)
    db.session.delete(banner)
    db.session.commit()
    return success_response(message="Banner deleted successfully")
