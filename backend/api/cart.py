from flask import Blueprint, request, session, current_app
from models.product import Product
from api.utils import success_response, error_response, validate_request_json
from services.order_service import shipping_cost_for_cart, MAX_QUANTITY
from datetime import datetime
import uuid

cart_bp = Blueprint('cart', __name__)

def get_or_create_session_id():
    """Get or create a session ID for cart"""
    if 'cart_session_id' not in session:
        session['cart_session_id'] = str(uuid.uuid4())
    return session['cart_session_id']

def get_cart_from_session():
    """Get cart from session or return empty cart"""
    session_id = get_or_create_session_id()
    cart_key = f'cart_{session_id}'
    return session.get(cart_key, {'items': [], 'updated_at': str(datetime.utcnow())})

def save_cart_to_session(cart_data):
    """Save cart to session"""
    session_id = get_or_create_session_id()
    cart_key = f'cart_{session_id}'
    cart_data['updated_at'] = str(datetime.utcnow())
    session[cart_key] = cart_data
    session.modified = True

def build_cart(cart_data):
    """
    Cart lines priced from the catalog. Lines whose product is gone or
    inactive are dropped.
    """
    lines = []
    for item in cart_data.get('items', []):
        product = Product.query.filter_by(id=item.get('product_id'), is_active=True).first()
        if not product:
            continue
        price = float(product.price)
        lines.append({
            'product_id': product.id,
            'name': product.name,
            'slug': product.slug,
            'image': product.primary_image,
            'price': price,
            'original_price': float(product.original_price) if product.original_price else None,
            'quantity': item['quantity'],
            'line_total': round(price * item['quantity'], 2),
            'stock': product.stock,
        })

    subtotal = round(sum(line['line_total'] for line in lines), 2)
    count = sum(line['quantity'] for line in lines)
    shipping = shipping_cost_for_cart(subtotal) if lines else 0.0
    return {
        'items': lines,
        'count': count,
        'subtotal': subtotal,
        'shipping_cost': shipping,
        'total': round(subtotal + shipping, 2),
        'free_shipping_threshold': current_app.config['FREE_SHIPPING_THRESHOLD'],
    }

def _parse_quantity(value, default=1):
    try:
        return int(value if value is not None else default)
    except (TypeError, ValueError):
        return None

@cart_bp.route('', methods=['GET'])
def get_cart():
    """Get current cart"""
    try:
        return success_response(build_cart(get_cart_from_session()))
    except Exception as e:
        return error_response(str(e), "INTERNAL_ERROR", 500)

@cart_bp.route('/add', methods=['POST'])
@validate_request_json(['product_id'])
def add_to_cart():
    """Add a product; an existing line has its quantity increased"""
    data = request.get_json()
    product_id = data.get('product_id')
    quantity = _parse_quantity(data.get('quantity'))
    if quantity is None or quantity < 1:
        return error_response("Quantity must be at least 1", "INVALID_QUANTITY", 400)

    product = Product.query.filter_by(id=product_id, is_active=True).first()
    if not product:
        return error_response("Product not found", "NOT_FOUND", 404)

    cart_data = get_cart_from_session()
    items = cart_data.get('items', [])
    for item in items:
        if item['product_id'] == product.id:
            item['quantity'] = min(item['quantity'] + quantity, MAX_QUANTITY)
            break
    else:
        items.append({'product_id': product.id, 'quantity': min(quantity, MAX_QUANTITY)})

    cart_data['items'] = items
    save_cart_to_session(cart_data)
    return success_response(build_cart(cart_data), "Added to cart")

@cart_bp.route('/items/<product_id>', methods=['PUT'])
@validate_request_json(['quantity'])
def update_cart_item(product_id):
    """Set a line's quantity; values below 1 become 1"""
    quantity = _parse_quantity(request.get_json().get('quantity'))
    if quantity is None:
        return error_response("Quantity must be a number", "INVALID_QUANTITY", 400)
    quantity = min(max(1, quantity), MAX_QUANTITY)

    cart_data = get_cart_from_session()
    for item in cart_data.get('items', []):
        if item['product_id'] == product_id:
            item['quantity'] = quantity
            break
    else:
        return error_response("Item not in cart", "NOT_FOUND", 404)

    save_cart_to_session(cart_data)
    return success_response(build_cart(cart_data))

@cart_bp.route('/items/<product_id>', methods=['DELETE'])
def remove_cart_item(product_id):
    cart_data = get_cart_from_session()
    cart_data['items'] = [item for item in cart_data.get('items', []) if item['product_id'] != product_id]
    save_cart_to_session(cart_data)
    return success_response(build_cart(cart_data), "Removed from cart")

@cart_bp.route('/clear', methods=['POST', 'DELETE'])
def clear_cart():
    cart_data = {'items': []}
    save_cart_to_session(cart_data)
    return success_response(build_cart(cart_data), "Cart cleared")

def clear_session_cart():
    """Empty the cart after a successful checkout"""
    save_cart_to_session({'items': []})
