from flask import Blueprint
from models.product import Category, Product
from models.banner import Banner
from api.utils import success_response, error_response

categories_bp = Blueprint('categories', __name__)
banners_bp = Blueprint('banners', __name__)

@categories_bp.route('', methods=['GET'])
def list_categories():
    """Categories ordered by sort_order"""
    try:
        categories = Category.query.order_by(Category.sort_order.asc(), Category.name.asc()).all()
        return success_response({"categories": [category.to_dict() for category in categories]})
    except Exception as e:
        return error_response(str(e), "INTERNAL_ERROR", 500)

@categories_bp.route('/<slug>', methods=['GET'])
def get_category(slug):
    category = Category.query.filter_by(slug=slug).first()
    if not category:
        return error_response("Category not found", "NOT_FOUND", 404)

    products = Product.query.filter_by(category_id=category.id, is_active=True) \
        .order_by(Product.created_at.desc()).all()
    data = category.to_dict()
    data['products'] = [product.to_dict() for product in products]
    return success_response({"category": data})

@banners_bp.route('', methods=['GET'])
def list_banners():
    banners = Banner.query.filter_by(is_active=True).order_by(Banner.sort_order.asc()).all()
    return success_response({"banners": [banner.to_dict() for banner in banners]})
