import uuid

from models.order import Order, OrderItem
from models.coupon import Coupon
from models import db


def place(client, items, shipping, **extra):
    payload = dict(items=items, shipping=shipping, **extra)
    return client.post('/api/v1/checkout/place-order', json=payload)


def test_flat_fee_below_free_shipping_threshold(client, make_product, shipping):
    product = make_product(price=900)

    response = place(client, [{'id': product.id, 'quantity': 2}], shipping)

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['subtotal'] == 1800
    assert data['shippingCost'] == 100
    assert data['total'] == 1900
    assert data['orderNumber'].startswith('ORD-')


def test_free_shipping_at_threshold(client, make_product, shipping):
    product = make_product(price=1000)

    response = place(client, [{'id': product.id, 'quantity': 2}], shipping)

    data = response.get_json()['data']
    assert data['subtotal'] == 2000
    assert data['shippingCost'] == 0
    assert data['total'] == 2000


def test_free_shipping_above_threshold(client, make_product, shipping):
    product = make_product(price=1250)

    response = place(client, [{'id': product.id, 'quantity': 2}], shipping)

    data = response.get_json()['data']
    assert data['subtotal'] == 2500
    assert data['shippingCost'] == 0
    assert data['total'] == 2500


def test_prices_come_from_catalog(client, make_product, shipping):
    product = make_product(price=500)

    response = place(client, [{'id': product.id, 'quantity': 1, 'price': 1}], shipping)

    assert response.get_json()['data']['subtotal'] == 500


def test_unknown_product_rejects_whole_order(client, make_product, shipping):
    product = make_product(price=500)

    response = place(client, [
        {'id': product.id, 'quantity': 1},
        {'id': str(uuid.uuid4()), 'quantity': 1},
    ], shipping)

    assert response.status_code == 400
    body = response.get_json()
    assert body['success'] is False
    assert body['code'] == 'ITEMS_UNAVAILABLE'
    assert Order.query.count() == 0
    assert OrderItem.query.count() == 0


def test_inactive_product_is_unavailable(client, make_product, shipping):
    product = make_product(price=500, is_active=False)

    response = place(client, [{'id': product.id, 'quantity': 1}], shipping)

    assert response.status_code == 400
    assert Order.query.count() == 0


def test_custom_items_are_accepted(client, shipping):
    response = place(client, [{'id': 'custom-1', 'name': 'Gift wrap', 'price': 150, 'quantity': 2}], shipping)

    assert response.status_code == 201
    order = Order.query.one()
    assert order.items[0].product_id is None
    assert order.items[0].product_name == 'Gift wrap'
    assert float(order.subtotal) == 300


def test_custom_item_with_bad_price_is_rejected(client, shipping):
    response = place(client, [{'name': 'Gift wrap', 'price': 0, 'quantity': 1}], shipping)

    assert response.status_code == 400
    assert response.get_json()['code'] == 'INVALID_ITEMS'


def test_out_of_range_quantities_are_dropped(client, make_product, shipping):
    product = make_product(price=100)
    other = make_product(price=200)

    response = place(client, [
        {'id': product.id, 'quantity': 3},
        {'id': other.id, 'quantity': 500},
    ], shipping)

    data = response.get_json()['data']
    assert len(data['items']) == 1
    assert data['subtotal'] == 300


def test_empty_cart(client, shipping):
    response = place(client, [], shipping)

    assert response.status_code == 400
    assert response.get_json()['code'] == 'EMPTY_CART'


def test_invalid_phone(client, make_product, shipping):
    product = make_product()
    shipping['phone'] = '12345'

    response = place(client, [{'id': product.id, 'quantity': 1}], shipping)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid phone number'


def test_storefront_requires_district(client, make_product, shipping):
    product = make_product()
    shipping['district'] = ''

    response = place(client, [{'id': product.id, 'quantity': 1}], shipping)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'District is required'


def test_coupon_discount_is_applied(client, make_product, shipping):
    product = make_product(price=1000)
    db.session.add(Coupon(code='EID200', discount_type='fixed', discount_value=200))
    db.session.commit()

    response = place(client, [{'id': product.id, 'quantity': 1}], shipping, coupon_code='eid200')

    data = response.get_json()['data']
    assert data['discount'] == 200
    assert data['total'] == 1000 - 200 + 100
    assert Coupon.query.filter_by(code='EID200').one().usage_count == 1


def test_unknown_coupon(client, make_product, shipping):
    product = make_product(price=1000)

    response = place(client, [{'id': product.id, 'quantity': 1}], shipping, coupon_code='NOPE')

    assert response.status_code == 400
    assert response.get_json()['code'] == 'INVALID_COUPON'
    assert Order.query.count() == 0


def test_checkout_clears_cart(client, make_product, shipping):
    product = make_product(price=300)
    client.post('/api/v1/cart/add', json={'product_id': product.id, 'quantity': 2})

    place(client, [{'id': product.id, 'quantity': 2}], shipping)

    assert client.get('/api/v1/cart').get_json()['data']['items'] == []


def test_track_order_by_number_and_phone(client, make_product, shipping):
    product = make_product(price=300)
    number = place(client, [{'id': product.id, 'quantity': 1}], shipping).get_json()['data']['orderNumber']

    response = client.get('/api/v1/orders/track', query_string={'order_number': number, 'phone': '+8801712345678'})
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == 'pending'

    response = client.get('/api/v1/orders/track', query_string={'order_number': number, 'phone': '01800000000'})
    assert response.status_code == 404
