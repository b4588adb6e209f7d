from flask import Blueprint
from flask_cors import CORS

api_v1 = Blueprint('api_v1', __name__, url_prefix='/api/v1')

CORS(api_v1, resources={
    r"/*": {
        "origins": "*",
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        "allow_headers": ["Content-Type"],
        "supports_credentials": True
    }
})

# Import all modules to ensure registration
from . import products, categories, cart, wishlist, coupons, checkout, orders, tracking

# Register Blueprints
api_v1.register_blueprint(products.products_bp, url_prefix='/products')
api_v1.register_blueprint(categories.categories_bp, url_prefix='/categories')
api_v1.register_blueprint(categories.banners_bp, url_prefix='/banners')
api_v1.register_blueprint(cart.cart_bp, url_prefix='/cart')
api_v1.register_blueprint(wishlist.wishlist_bp, url_prefix='/wishlist')
api_v1.register_blueprint(coupons.coupons_bp, url_prefix='/coupons')
api_v1.register_blueprint(checkout.checkout_bp, url_prefix='/checkout')
api_v1.register_blueprint(orders.orders_bp, url_prefix='/orders')
api_v1.register_blueprint(tracking.tracking_bp, url_prefix='/tracking')

@api_v1.route('/home', methods=['GET'])
def home_alias():
    return products.get_home_data()
