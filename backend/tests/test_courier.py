import pytest
import requests

from models import db
from models.order import Order, OrderItem
from services import courier_history, sms_service
from services.courier_service import SteadfastService


@pytest.fixture
def order(make_product, shipping):
    def _make(status='pending', **kwargs):
        product = make_product(price=1200)
        order = Order(
            order_number=kwargs.pop('order_number', f'ORD-20250101-{Order.query.count():06d}'),
            status=status,
            payment_method=kwargs.pop('payment_method', 'cod'),
            subtotal=1200, shipping_cost=80, discount=0, total=1280,
            shipping_name=shipping['name'], shipping_phone=shipping['phone'],
            shipping_street=shipping['street'], shipping_city='Dhaka', shipping_district='Dhaka',
            **kwargs
        )
        order.items.append(OrderItem(product_id=product.id, product_name=product.name, quantity=1, price=1200))
        db.session.add(order)
        db.session.commit()
        return order
    return _make


@pytest.fixture
def steadfast(monkeypatch, fake_response):
    """Records Steadfast calls and answers with a booked consignment"""
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({'url': url, 'json': json, 'headers': headers})
        return fake_response(200, {
            'status': 200,
            'message': 'Consignment has been created successfully.',
            'consignment': {'consignment_id': 1424107, 'tracking_code': f'SFR{len(calls)}'},
        })

    monkeypatch.setattr(requests, 'post', fake_post)
    return calls


@pytest.fixture
def notified(monkeypatch):
    """Order events that would have been sent as SMS"""
    events = []
    monkeypatch.setattr(sms_service, 'notify_order_event',
                        lambda order, event: events.append((order.order_number, event)))
    return events


def test_payload_for_cod_order(order):
    payload = SteadfastService.build_payload(order())

    assert payload['cod_amount'] == 1280
    assert payload['recipient_address'] == 'House 12, Road 5, Dhanmondi, Dhaka, Dhaka'
    assert payload['note'] == 'Order items: Leather Sandal x1'


def test_online_paid_order_collects_nothing(order):
    payload = SteadfastService.build_payload(order(payment_method='online', notes='Call before delivery'))

    assert payload['cod_amount'] == 0
    assert payload['note'] == 'Call before delivery'


def test_book_order(admin_client, order, steadfast, notified):
    booked = order()

    response = admin_client.post(f'/admin/orders/{booked.id}/courier')

    assert response.status_code == 200
    assert steadfast[0]['url'].endswith('/create_order')
    assert steadfast[0]['headers']['Api-Key'] == 'test-api-key'
    assert steadfast[0]['headers']['Secret-Key'] == 'test-secret-key'
    assert steadfast[0]['json']['invoice'] == booked.order_number

    stored = db.session.get(Order, booked.id)
    assert stored.tracking_number == 'SFR1'
    assert stored.consignment_id == '1424107'
    assert stored.status == 'processing'
    assert notified == [(booked.order_number, 'order_processing')]


def test_confirmed_order_keeps_its_status(admin_client, order, steadfast, notified):
    booked = order(status='confirmed')

    response = admin_client.post(f'/admin/orders/{booked.id}/courier')

    assert response.status_code == 200
    assert db.session.get(Order, booked.id).status == 'confirmed'
    assert db.session.get(Order, booked.id).tracking_number == 'SFR1'
    assert notified == []


def test_bulk_booking_notifies_only_moved_orders(admin_client, order, steadfast, notified):
    pending = order()
    confirmed = order(status='confirmed')

    response = admin_client.post('/admin/orders/courier/bulk', json={'order_ids': [pending.id, confirmed.id]})

    assert response.get_json()['data']['success_count'] == 2
    assert notified == [(pending.order_number, 'order_processing')]


def test_order_is_booked_once(admin_client, order, steadfast):
    booked = order(tracking_number='SFR-OLD')

    response = admin_client.post(f'/admin/orders/{booked.id}/courier')

    assert response.status_code == 400
    assert response.get_json()['code'] == 'ALREADY_BOOKED'
    assert steadfast == []


def test_bulk_booking_reports_failures(admin_client, order, steadfast):
    good = order()
    cancelled = order(status='cancelled')

    response = admin_client.post('/admin/orders/courier/bulk', json={
        'order_ids': [good.id, cancelled.id, 'missing-order'],
    })

    body = response.get_json()
    assert response.status_code == 200
    assert body['message'] == 'Sent 1 orders, 2 failed'
    assert body['data']['success_count'] == 1
    assert body['data']['failure_count'] == 2
    assert len(steadfast) == 1


def test_steadfast_rejection_is_reported(admin_client, order, monkeypatch, fake_response):
    booked = order()
    monkeypatch.setattr(requests, 'post', lambda *a, **kw: fake_response(200, {
        'status': 400,
        'message': 'The given data was invalid.',
        'errors': {'recipient_phone': ['The recipient phone must be 11 digits.']},
    }))

    response = admin_client.post(f'/admin/orders/{booked.id}/courier')

    body = response.get_json()
    assert response.status_code == 400
    assert body['error'] == 'The given data was invalid.'
    assert body['details']['recipient_phone']
    assert db.session.get(Order, booked.id).tracking_number is None


def test_missing_credentials(app, admin_client, order):
    app.config['STEADFAST_API_KEY'] = None
    booked = order()

    response = admin_client.post(f'/admin/orders/{booked.id}/courier')

    assert response.status_code == 500
    assert response.get_json()['code'] == 'NOT_CONFIGURED'


def test_raw_consignment_requires_fields(admin_client, steadfast):
    response = admin_client.post('/admin/courier/steadfast', json={'invoice': 'INV-1'})

    assert response.status_code == 400
    assert response.get_json()['code'] == 'MISSING_FIELDS'
    assert steadfast == []


@pytest.mark.parametrize('ratio, level', [(None, 'Unknown'), (95, 'Low'), (80, 'Low'), (50, 'Medium'), (49.9, 'High')])
def test_risk_level(ratio, level):
    assert courier_history.risk_level(ratio) == level


def test_normalize_phone():
    assert courier_history.normalize_phone('+880 1712-345678') == '01712345678'
    assert courier_history.normalize_phone('1712345678') == '01712345678'


def test_history_lookup(admin_client, monkeypatch, fake_response):
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(url=url, params=params, headers=headers)
        return fake_response(200, {
            'status': 'success',
            'data': {
                'summary': {'total_parcel': 10, 'success_parcel': 9, 'cancelled_parcel': 1},
                'steadfast': {'total_parcel': 6, 'success_parcel': 6, 'cancelled_parcel': 0},
                'pathao': {'total_parcel': 4, 'success_parcel': 3, 'cancelled_parcel': 1},
            },
        })

    monkeypatch.setattr(requests, 'get', fake_get)

    response = admin_client.get('/admin/courier/history', query_string={'phone': '+8801712345678'})

    data = response.get_json()['data']
    assert seen['params'] == {'phone': '01712345678'}
    assert seen['headers']['Authorization'] == 'Bearer test-bdcourier-key'
    assert data['summary']['success_ratio'] == 90.0
    assert data['summary']['risk_level'] == 'Low'
    assert data['summary']['couriers']['pathao']['success_ratio'] == 75.0
    assert data['summary']['couriers']['redx']['total_parcel'] == 0


def test_history_blocked_by_bot_protection(admin_client, monkeypatch, fake_response):
    monkeypatch.setattr(requests, 'get', lambda *a, **kw: fake_response(
        403, text='<html><script src="/cdn-cgi/challenge-platform/x.js"></script></html>'))

    response = admin_client.post('/admin/courier/history', json={'phone': '01712345678'})

    body = response.get_json()
    assert response.status_code == 200
    assert body['success'] is False
    assert body['blocked'] is True


def test_history_timeout_counts_as_blocked(admin_client, monkeypatch):
    def timeout(*args, **kwargs):
        raise requests.Timeout('read timed out')

    monkeypatch.setattr(requests, 'get', timeout)

    body = admin_client.get('/admin/courier/history', query_string={'phone': '01712345678'}).get_json()

    assert body['blocked'] is True


def test_history_upstream_error(admin_client, monkeypatch, fake_response):
    monkeypatch.setattr(requests, 'get', lambda *a, **kw: fake_response(500, text='server error'))

    response = admin_client.get('/admin/courier/history', query_string={'phone': '01712345678'})

    assert response.status_code == 500
    assert response.get_json()['code'] == 'COURIER_HISTORY_ERROR'


def test_history_requires_phone(admin_client):
    response = admin_client.get('/admin/courier/history')

    assert response.status_code == 400
