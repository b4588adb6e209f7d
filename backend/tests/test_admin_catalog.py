from models import db
from models.order import Order, OrderItem
from models.product import Product


def test_create_product(admin_client, make_category):
    category = make_category()

    response = admin_client.post('/admin/products', json={
        'name': 'Cotton Panjabi', 'price': 1350, 'original_price': 1800,
        'stock': 12, 'category_id': category.id, 'images': ['https://cdn.test/a.jpg'],
    })

    assert response.status_code == 201
    product = response.get_json()['data']['product']
    assert product['slug'] == 'cotton-panjabi'
    assert product['discount'] == 25
    assert product['image'] == 'https://cdn.test/a.jpg'

    again = admin_client.post('/admin/products', json={'name': 'Cotton Panjabi', 'price': 1000})
    assert again.get_json()['data']['product']['slug'] == 'cotton-panjabi-2'


def test_product_validation(admin_client, make_product):
    product = make_product()

    assert admin_client.post('/admin/products', json={'name': 'X', 'price': -5}).status_code == 400
    assert admin_client.put(f'/admin/products/{product.id}', json={'category_id': 'nope'}).status_code == 400
    assert admin_client.put(f'/admin/products/{product.id}', json={'images': 'a.jpg'}).status_code == 400
    assert admin_client.put(f'/admin/products/{product.id}/stock', json={'stock': -1}).status_code == 400


def test_low_stock(admin_client, make_product):
    empty = make_product(stock=0)
    low = make_product(stock=4)
    make_product(stock=30)
    make_product(stock=1, is_active=False)

    data = admin_client.get('/admin/products/low-stock').get_json()['data']

    assert [item['id'] for item in data['products']] == [empty.id, low.id]


def test_delete_product_keeps_order_snapshot(admin_client, make_product):
    product = make_product(name='Kolhapuri')
    order = Order(order_number='ORD-SNAPSHOT', shipping_name='Rahim', shipping_phone='01712345678',
                  shipping_street='Road 5', shipping_city='Dhaka', shipping_district='Dhaka',
                  subtotal=900, shipping_cost=100, total=1000)
    order.items.append(OrderItem(product_id=product.id, product_name='Kolhapuri', quantity=1, price=900))
    db.session.add(order)
    db.session.commit()

    assert admin_client.delete(f'/admin/products/{product.id}').status_code == 200

    item = OrderItem.query.one()
    assert item.product_id is None
    assert item.product_name == 'Kolhapuri'
    assert db.session.get(Product, product.id) is None


def test_coupon_admin(admin_client):
    response = admin_client.post('/admin/coupons', json={
        'code': 'eid25', 'discount_type': 'percentage', 'discount_value': 25,
    })
    assert response.status_code == 201
    coupon = response.get_json()['data']['coupon']
    assert coupon['code'] == 'EID25'

    duplicate = admin_client.post('/admin/coupons', json={
        'code': 'EID25', 'discount_type': 'fixed', 'discount_value': 10,
    })
    assert duplicate.get_json()['error'] == 'Coupon code already exists'

    too_much = admin_client.put(f"/admin/coupons/{coupon['id']}", json={'discount_value': 150})
    assert too_much.status_code == 400

    toggled = admin_client.post(f"/admin/coupons/{coupon['id']}/toggle").get_json()
    assert toggled['message'] == 'Coupon deactivated'


def test_shipping_settings(admin_client):
    response = admin_client.put('/admin/settings/shipping', json={'zone_fees': {'inside_dhaka': 70}})
    assert response.get_json()['data']['zone_fees'] == {'inside_dhaka': 70.0, 'outside_dhaka': 130}

    assert admin_client.put('/admin/settings/shipping', json={'zone_fees': {'chittagong': 90}}).status_code == 400
    assert admin_client.put('/admin/settings/shipping', json={'flat_shipping_fee': -1}).status_code == 400
