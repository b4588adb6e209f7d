from datetime import datetime, timedelta

from models import db
from models.coupon import Coupon


def add(client, product, quantity=1):
    return client.post('/api/v1/cart/add', json={'product_id': product.id, 'quantity': quantity})


def test_empty_cart(client):
    data = client.get('/api/v1/cart').get_json()['data']

    assert data['items'] == []
    assert data['shipping_cost'] == 0
    assert data['total'] == 0


def test_add_merges_lines(client, make_product):
    product = make_product(price=900)

    add(client, product, 1)
    data = add(client, product, 2).get_json()['data']

    assert len(data['items']) == 1
    assert data['items'][0]['quantity'] == 3
    assert data['subtotal'] == 2700
    assert data['shipping_cost'] == 0
    assert data['count'] == 3


def test_cart_is_priced_from_catalog(client, make_product):
    product = make_product(price=500)
    add(client, product, 2)

    product.price = 450
    db.session.commit()

    data = client.get('/api/v1/cart').get_json()['data']
    assert data['subtotal'] == 900
    assert data['shipping_cost'] == 100
    assert data['total'] == 1000


def test_quantity_is_capped(client, make_product):
    product = make_product()

    add(client, product, 90)
    data = add(client, product, 20).get_json()['data']

    assert data['items'][0]['quantity'] == 99


def test_add_rejects_bad_input(client, make_product):
    product = make_product(is_active=False)

    assert add(client, product).status_code == 404
    assert client.post('/api/v1/cart/add', json={'product_id': product.id, 'quantity': 0}).status_code == 400


def test_update_clamps_quantity(client, make_product):
    product = make_product()
    add(client, product, 3)

    response = client.put(f'/api/v1/cart/items/{product.id}', json={'quantity': -4})

    assert response.get_json()['data']['items'][0]['quantity'] == 1
    assert client.put('/api/v1/cart/items/missing', json={'quantity': 2}).status_code == 404


def test_remove_and_clear(client, make_product):
    first, second = make_product(), make_product()
    add(client, first)
    add(client, second)

    data = client.delete(f'/api/v1/cart/items/{first.id}').get_json()['data']
    assert [line['product_id'] for line in data['items']] == [second.id]

    data = client.post('/api/v1/cart/clear').get_json()['data']
    assert data['items'] == []


def test_wishlist(client, make_product):
    product = make_product()

    data = client.post(f'/api/v1/wishlist/{product.id}').get_json()['data']
    assert data['product_ids'] == [product.id]

    data = client.post(f'/api/v1/wishlist/{product.id}').get_json()['data']
    assert data['product_ids'] == [product.id]

    data = client.post(f'/api/v1/wishlist/{product.id}/toggle').get_json()['data']
    assert data['product_ids'] == []

    data = client.post(f'/api/v1/wishlist/{product.id}/toggle').get_json()['data']
    assert data['products'][0]['slug'] == product.slug

    data = client.delete(f'/api/v1/wishlist/{product.id}').get_json()['data']
    assert data['product_ids'] == []


def test_wishlist_unknown_product(client):
    assert client.post('/api/v1/wishlist/nope').status_code == 404


def test_validate_coupon(client):
    db.session.add(Coupon(code='SAVE10', discount_type='percentage', discount_value=10, max_discount_amount=150))
    db.session.commit()

    response = client.post('/api/v1/coupons/validate', json={'code': ' save10 ', 'order_total': 2000})

    data = response.get_json()['data']
    assert data['code'] == 'SAVE10'
    assert data['discount_amount'] == 150
    assert data['final_total'] == 1850


def test_expired_coupon(client):
    db.session.add(Coupon(code='OLD', discount_type='fixed', discount_value=50,
                          expires_at=datetime.utcnow() - timedelta(days=1)))
    db.session.commit()

    response = client.post('/api/v1/coupons/validate', json={'code': 'OLD', 'order_total': 500})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Coupon has expired'


def test_coupon_minimum_amount(client):
    db.session.add(Coupon(code='BIG', discount_type='fixed', discount_value=100, min_order_amount=1500))
    db.session.commit()

    response = client.post('/api/v1/coupons/validate', json={'code': 'BIG', 'order_total': 1000})

    assert response.status_code == 400
    assert response.get_json()['code'] == 'COUPON_INVALID'
    assert client.post('/api/v1/coupons/validate', json={'code': 'NONE'}).status_code == 404


def test_product_listing(client, make_category, make_product):
    shoes = make_category()
    cheap = make_product(name='Canvas Shoe', price=400, category_id=shoes.id)
    dear = make_product(name='Leather Boot', price=2400, category_id=shoes.id, is_featured=True)
    make_product(name='Hidden', is_active=False)

    data = client.get('/api/v1/products', query_string={'sort': 'price_asc'}).get_json()['data']
    assert [item['id'] for item in data['products']] == [cheap.id, dear.id]

    data = client.get('/api/v1/products', query_string={'featured': '1'}).get_json()['data']
    assert [item['id'] for item in data['products']] == [dear.id]

    data = client.get('/api/v1/products', query_string={'q': 'canvas'}).get_json()['data']
    assert [item['id'] for item in data['products']] == [cheap.id]

    data = client.get('/api/v1/products', query_string={'category': 'missing'}).get_json()['data']
    assert data['products'] == []


def test_product_detail(client, make_category, make_product):
    shoes = make_category()
    product = make_product(category_id=shoes.id)
    other = make_product(category_id=shoes.id)

    data = client.get(f'/api/v1/products/{product.slug}').get_json()['data']

    assert data['product']['id'] == product.id
    assert [item['id'] for item in data['related']] == [other.id]
    assert client.get('/api/v1/products/missing').status_code == 404


def test_home_data(client, make_category, make_product):
    make_category(name='Sandals')
    make_product(is_featured=True)
    make_product(is_new=True)

    data = client.get('/api/v1/home').get_json()['data']

    assert len(data['featured_products']) == 1
    assert len(data['new_arrivals']) == 1
    assert data['categories'][0]['name'] == 'Sandals'
