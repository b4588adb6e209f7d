from flask import Blueprint, session
from models.product import Product
from api.utils import success_response, error_response

wishlist_bp = Blueprint('wishlist', __name__)

WISHLIST_KEY = 'wishlist'

def get_wishlist_ids():
    return list(session.get(WISHLIST_KEY, []))

def save_wishlist_ids(ids):
    session[WISHLIST_KEY] = ids
    session.modified = True

def wishlist_payload(ids):
    products = Product.query.filter(Product.id.in_(ids), Product.is_active.is_(True)).all() if ids else []
    by_id = {product.id: product for product in products}
    return {
        'product_ids': [pid for pid in ids if pid in by_id],
        'products': [by_id[pid].to_dict() for pid in ids if pid in by_id],
    }

@wishlist_bp.route('', methods=['GET'])
def get_wishlist():
    return success_response(wishlist_payload(get_wishlist_ids()))

@wishlist_bp.route('/<product_id>', methods=['POST'])
def add_to_wishlist(product_id):
    if not Product.query.filter_by(id=product_id, is_active=True).first():
        return error_response("Product not found", "NOT_FOUND", 404)
    ids = get_wishlist_ids()
    if product_id not in ids:
        ids.append(product_id)
        save_wishlist_ids(ids)
    return success_response(wishlist_payload(ids), "Added to wishlist")

@wishlist_bp.route('/<product_id>', methods=['DELETE'])
def remove_from_wishlist(product_id):
    ids = [pid for pid in get_wishlist_ids() if pid != product_id]
    save_wishlist_ids(ids)
    return success_response(wishlist_payload(ids), "Removed from wishlist")

@wishlist_bp.route('/<product_id>/toggle', methods=['POST'])
def toggle_wishlist(product_id):
    ids = get_wishlist_ids()
    if product_id in ids:
        return remove_from_wishlist(product_id)
    return add_to_wishlist(product_id)
