"""
Order placement.

Prices always come from the catalog for catalog items; the client payload
only chooses products and quantities. Two shipping policies exist:

* ``threshold``: storefront checkout, free above FREE_SHIPPING_THRESHOLD,
  otherwise FLAT_SHIPPING_FEE.
* ``zone``: admin manual orders and landing page forms, a fixed fee per
  delivery zone (inside/outside Dhaka).
"""
import logging
import random
import re
import string
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.coupon import Coupon
from models.order import Order, OrderItem
from models.product import Product
from models.setting import Setting
from services.order_lifecycle import assert_order_transition
from utils.exceptions import ShopError, ValidationError, NotFoundError
from utils.validators import is_bangladesh_phone, is_uuid

logger = logging.getLogger(__name__)

MAX_ITEMS = 50
MAX_QUANTITY = 99
MAX_NAME_LENGTH = 100
MAX_PHONE_LENGTH = 30
MAX_ADDRESS_LENGTH = 300
MAX_ITEM_NAME_LENGTH = 150
MAX_ITEM_PRICE = 10000000
MAX_IMAGE_URL_LENGTH = 2048

SHIPPING_POLICY_THRESHOLD = 'threshold'
SHIPPING_POLICY_ZONE = 'zone'

PAYMENT_METHODS = ('cod', 'online')


def generate_order_number():
    """Generate unique order number"""
    timestamp = datetime.utcnow().strftime('%Y%m%d')
    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f'ORD-{timestamp}-{random_part}'


def _unique_order_number():
    order_number = generate_order_number()
    while Order.query.filter_by(order_number=order_number).first():
        order_number = generate_order_number()
    return order_number


# ---------------------------------------------------------------------------
# Shipping
# ---------------------------------------------------------------------------

def shipping_cost_for_cart(subtotal):
    """Threshold policy used by the storefront checkout"""
    threshold = Setting.get('free_shipping_threshold', current_app.config['FREE_SHIPPING_THRESHOLD'])
    flat_fee = Setting.get('flat_shipping_fee', current_app.config['FLAT_SHIPPING_FEE'])
    if subtotal >= float(threshold):
        return 0.0
    return float(flat_fee)


def normalize_zone(zone):
    fees = current_app.config['SHIPPING_ZONE_FEES']
    if zone in fees:
        return zone
    return current_app.config['DEFAULT_SHIPPING_ZONE']


def shipping_cost_for_zone(zone):
    """Per-zone policy used by manual and landing page orders"""
    zone = normalize_zone(zone)
    override = Setting.get(f'shipping_fee_{zone}')
    if override is not None:
        return float(override)
    return float(current_app.config['SHIPPING_ZONE_FEES'][zone])


def zone_for_district(district):
    if district and 'dhaka' in district.strip().lower():
        return 'inside_dhaka'
    return 'outside_dhaka'


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_shipping(shipping, require_city=False):
    """Check the recipient block and return a cleaned copy"""
    if not isinstance(shipping, dict):
        raise ValidationError("Invalid shipping details")

    name = str(shipping.get('name') or '').strip()
    if not name or len(name) > MAX_NAME_LENGTH:
        raise ValidationError("Invalid name")

    phone = str(shipping.get('phone') or '')
    if len(phone) > MAX_PHONE_LENGTH or not is_bangladesh_phone(phone):
        raise ValidationError("Invalid phone number")

    street = str(shipping.get('street') or shipping.get('address') or '').strip()
    if not street or len(street) > MAX_ADDRESS_LENGTH:
        raise ValidationError("Invalid address")

    city = str(shipping.get('city') or '').strip()
    district = str(shipping.get('district') or '').strip()
    if require_city:
        if not city:
            raise ValidationError("City is required")
        if not district:
            raise ValidationError("District is required")

    return {
        'name': name,
        'phone': re.sub(r'\s+', '', phone),
        'street': street,
        'city': city[:100] or 'N/A',
        'district': district[:100] or 'N/A',
        'postal_code': str(shipping.get('postal_code') or shipping.get('postalCode') or '').strip()[:20] or None,
    }


def _quantity(item):
    try:
        quantity = int(item.get('quantity', 0))
    except (TypeError, ValueError):
        return 0
    return quantity


def clean_items(items):
    """Drop lines with an out-of-range quantity"""
    if not isinstance(items, list) or not items or len(items) > MAX_ITEMS:
        raise ValidationError("Cart is empty", "EMPTY_CART")

    cleaned = []
    for item in items:
        if not isinstance(item, dict):
            continue
        quantity = _quantity(item)
        if 0 < quantity <= MAX_QUANTITY:
            cleaned.append(dict(item, quantity=quantity))

    if not cleaned:
        raise ValidationError("Invalid items", "INVALID_ITEMS")
    return cleaned


def _custom_line(item):
    name = item.get('name')
    price = item.get('price')
    image = item.get('image') or None

    if not isinstance(name, str) or not name.strip() or len(name) > MAX_ITEM_NAME_LENGTH:
        raise ValidationError("Invalid items", "INVALID_ITEMS")
    if isinstance(price, bool) or not isinstance(price, (int, float)) or not 0 < price <= MAX_ITEM_PRICE:
        raise ValidationError("Invalid items", "INVALID_ITEMS")
    if image is not None and (not isinstance(image, str) or len(image) > MAX_IMAGE_URL_LENGTH):
        raise ValidationError("Invalid items", "INVALID_ITEMS")

    return {
        'product_id': None,
        'product_name': name.strip(),
        'product_image': image,
        'price': round(float(price), 2),
        'quantity': item['quantity'],
    }


def price_items(items):
    """
    Resolve catalog prices for UUID items and vet custom (non-catalog) ones.
    Any unknown or inactive catalog id rejects the whole order.
    """
    catalog_ids = {str(item.get('id') or item.get('product_id')) for item in items
                   if is_uuid(item.get('id') or item.get('product_id'))}

    products = {}
    if catalog_ids:
        rows = Product.query.filter(Product.id.in_(catalog_ids), Product.is_active.is_(True)).all()
        products = {product.id: product for product in rows}
        if len(products) != len(catalog_ids):
            raise ValidationError("Some items are unavailable", "ITEMS_UNAVAILABLE")

    lines = []
    for item in items:
        item_id = item.get('id') or item.get('product_id')
        if is_uuid(item_id):
            product = products[str(item_id)]
            lines.append({
                'product_id': product.id,
                'product_name': product.name,
                'product_image': product.primary_image,
                'price': float(product.price),
                'quantity': item['quantity'],
            })
        else:
            lines.append(_custom_line(item))
    return lines


def resolve_coupon(code, subtotal):
    """Return (coupon, discount) or raise when the code cannot be used"""
    code = Coupon.normalize_code(code)
    if not code:
        return None, 0.0
    coupon = Coupon.query.filter_by(code=code).first()
    if not coupon:
        raise ValidationError("Invalid coupon code", "INVALID_COUPON")
    is_valid, message = coupon.is_valid(order_total=subtotal)
    if not is_valid:
        raise ValidationError(message, "COUPON_INVALID")
    return coupon, coupon.calculate_discount(subtotal)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def place_order(payload, shipping_policy=SHIPPING_POLICY_THRESHOLD, order_source='website', user_id=None):
    """
    Validate, price and persist an order with its items in one transaction.

    Returns the committed Order. Raises ValidationError for bad input and
    ShopError(500) when the database write fails; nothing is written in
    either case.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request must be JSON")

    shipping = validate_shipping(
        payload.get('shipping') or {},
        require_city=shipping_policy == SHIPPING_POLICY_THRESHOLD
    )
    lines = price_items(clean_items(payload.get('items')))

    subtotal = round(sum(line['price'] * line['quantity'] for line in lines), 2)
    coupon, discount = resolve_coupon(payload.get('coupon_code'), subtotal)

    zone = None
    if shipping_policy == SHIPPING_POLICY_ZONE:
        zone = normalize_zone(payload.get('shipping_zone') or payload.get('shippingZone'))
        shipping_cost = shipping_cost_for_zone(zone)
    else:
        shipping_cost = shipping_cost_for_cart(subtotal)

    payment_method = payload.get('payment_method') or 'cod'
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Invalid payment method")

    notes = payload.get('notes')
    if notes is not None:
        notes = str(notes).strip()[:1000] or None

    total = round(subtotal - discount + shipping_cost, 2)

    try:
        order = Order(
            order_number=_unique_order_number(),
            user_id=user_id,
            status='pending',
            payment_method=payment_method,
            payment_status='pending',
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            discount=discount,
            total=total,
            coupon_code=coupon.code if coupon else None,
            shipping_name=shipping['name'],
            shipping_phone=shipping['phone'],
            shipping_street=shipping['street'],
            shipping_city=shipping['city'],
            shipping_district=shipping['district'],
            shipping_postal_code=shipping['postal_code'],
            shipping_zone=zone,
            notes=notes,
            order_source=order_source,
        )
        for line in lines:
            order.items.append(OrderItem(**line))
        if coupon:
            coupon.apply()

        db.session.add(order)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to place order: {e}")
        raise ShopError("Failed to place order", "ORDER_FAILED", 500)

    logger.info(f"Order {order.order_number} placed from {order_source}, total {total}")
    return order


def order_summary(order):
    """Response body returned to whoever placed the order"""
    return {
        'orderId': order.id,
        'orderNumber': order.order_number,
        'subtotal': float(order.subtotal),
        'shippingCost': float(order.shipping_cost),
        'discount': float(order.discount),
        'total': float(order.total),
        'items': [
            {
                'productId': item.product_id,
                'name': item.product_name,
                'image': item.product_image,
                'price': float(item.price),
                'quantity': item.quantity,
            }
            for item in order.items
        ],
    }


def place_landing_order(page, form, product=None):
    """
    Order from a landing page's embedded form.

    With a product the order is priced like a manual order (zone fee by
    district). Without one, a zero-total lead row is stored for follow-up.
    """
    source = f'landing-page:{page.slug}'
    district = str(form.get('district') or '').strip()
    shipping = {
        'name': form.get('name'),
        'phone': form.get('phone'),
        'address': form.get('address'),
        'district': district,
        'city': district,
    }

    if product is not None:
        payload = {
            'items': [{'id': product.id, 'quantity': form.get('quantity') or 1}],
            'shipping': shipping,
            'shipping_zone': zone_for_district(district),
            'notes': form.get('notes'),
        }
        return place_order(payload, shipping_policy=SHIPPING_POLICY_ZONE, order_source=source)

    cleaned = validate_shipping(shipping)
    try:
        order = Order(
            order_number=_unique_order_number(),
            status='pending',
            payment_method='cod',
            payment_status='pending',
            subtotal=0,
            shipping_cost=0,
            discount=0,
            total=0,
            shipping_name=cleaned['name'],
            shipping_phone=cleaned['phone'],
            shipping_street=cleaned['street'],
            shipping_city=cleaned['city'],
            shipping_district=cleaned['district'],
            notes='Landing page lead',
            order_source=source,
        )
        db.session.add(order)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to store landing page lead: {e}")
        raise ShopError("Failed to place order", "ORDER_FAILED", 500)

    logger.info(f"Lead {order.order_number} captured from {source}")
    return order


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------

def get_order_or_404(order_id):
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def update_order_status(order, status=None, tracking_number=None):
    """
    Change status and/or tracking number. Returns True when the status
    actually changed so callers can notify the customer.
    """
    changed = False
    if status and status != order.status:
        assert_order_transition(order.status, status)
        order.status = status
        changed = True
        if status == 'delivered' and order.payment_method == 'cod':
            order.payment_status = 'paid'
        elif status == 'returned' and order.payment_status == 'paid':
            order.payment_status = 'refunded'

    if tracking_number is not None:
        order.tracking_number = str(tracking_number).strip() or None

    order.updated_at = datetime.utcnow()
    db.session.commit()
    return changed
