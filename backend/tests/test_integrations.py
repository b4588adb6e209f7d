import hashlib

import pytest
import requests

from models import db
from models.setting import Setting
from models.sms import SmsLog, SmsTemplate
from services import facebook_capi, sms_service


def sha256(value):
    return hashlib.sha256(value.encode('utf-8')).hexdigest()


@pytest.fixture
def capi_configured(app):
    Setting.set('fb_pixel_id', '123456789', 'string', 'marketing')
    Setting.set('fb_capi_token', 'capi-token', 'string', 'marketing')


@pytest.fixture
def sms_enabled(app):
    Setting.set('sms_enabled', True, 'boolean', 'sms')
    Setting.set('sms_api_key', 'sms-key', 'string', 'sms')
    Setting.set('sms_sender_id', 'DOKAN', 'string', 'sms')


def test_hash_value_normalizes_before_hashing():
    assert facebook_capi.hash_value('  Customer@Example.COM ') == sha256('customer@example.com')


def test_hash_user_data():
    hashed = facebook_capi.hash_user_data({
        'email': 'a@b.com',
        'phone': '+880 1712-345678',
        'first_name': 'Rahim',
        'city': 'Dhaka',
    })

    assert hashed == {
        'em': [sha256('a@b.com')],
        'ph': [sha256('8801712345678')],
        'fn': [sha256('rahim')],
    }


def test_event_is_skipped_when_not_configured(client, monkeypatch):
    monkeypatch.setattr(requests, 'post', pytest.fail)

    response = client.post('/api/v1/tracking/events', json={'event_name': 'ViewContent'})

    assert response.status_code == 200
    assert response.get_json() == {'success': False, 'message': 'CAPI not configured'}


def test_event_is_forwarded(client, capi_configured, monkeypatch, fake_response):
    sent = {}

    def fake_post(url, params=None, json=None, timeout=None):
        sent.update(url=url, params=params, json=json)
        return fake_response(200, {'events_received': 1})

    monkeypatch.setattr(requests, 'post', fake_post)

    response = client.post('/api/v1/tracking/events', json={
        'event_name': 'AddToCart',
        'event_id': 'evt-1',
        'user_data': {'phone': '01712345678'},
        'custom_data': {'value': 900, 'currency': 'BDT'},
    }, headers={'X-Forwarded-For': '203.0.113.7, 10.0.0.1', 'User-Agent': 'pytest'})

    assert response.get_json()['data'] == {'events_received': 1}
    assert sent['url'] == 'https://graph.facebook.com/v18.0/123456789/events'
    assert sent['params'] == {'access_token': 'capi-token'}
    event = sent['json']['data'][0]
    assert event['event_name'] == 'AddToCart'
    assert event['event_id'] == 'evt-1'
    assert event['action_source'] == 'website'
    assert event['user_data']['ph'] == [sha256('01712345678')]
    assert event['user_data']['client_ip_address'] == '203.0.113.7'
    assert event['user_data']['client_user_agent'] == 'pytest'


def test_graph_error_is_reported(client, capi_configured, monkeypatch, fake_response):
    monkeypatch.setattr(requests, 'post', lambda *a, **kw: fake_response(400, {'error': {'message': 'bad'}}))

    response = client.post('/api/v1/tracking/events', json={'event_name': 'Purchase'})

    assert response.status_code == 400
    assert response.get_json()['code'] == 'CAPI_ERROR'


def test_pixel_config(client):
    assert client.get('/api/v1/tracking/pixel-config').get_json()['data'] == {'pixel_id': None, 'enabled': False}

    Setting.set('fb_pixel_id', '987', 'string', 'marketing')
    Setting.set('fb_pixel_enabled', True, 'boolean', 'marketing')

    assert client.get('/api/v1/tracking/pixel-config').get_json()['data'] == {'pixel_id': '987', 'enabled': True}


def test_marketing_settings_hide_token(admin_client):
    response = admin_client.put('/admin/settings/marketing', json={'fb_pixel_id': ' 555 ', 'fb_capi_token': 'secret'})

    data = response.get_json()['data']
    assert data['fb_pixel_id'] == '555'
    assert data['fb_capi_token_set'] is True
    assert 'secret' not in response.get_data(as_text=True)


def test_render_message_keeps_unknown_placeholders():
    message = sms_service.render_message('Hi {name}, order {order_number} {coupon}', {
        'name': 'Rahim', 'order_number': 'ORD-1',
    })

    assert message == 'Hi Rahim, order ORD-1 {coupon}'


def test_sms_disabled_sends_nothing(app, monkeypatch):
    monkeypatch.setattr(requests, 'post', pytest.fail)

    assert sms_service.send_sms('01712345678', 'hello') is False
    assert SmsLog.query.count() == 0


def test_sms_is_sent_and_logged(app, sms_enabled, monkeypatch, fake_response):
    sent = {}

    def fake_post(url, data=None, timeout=None):
        sent.update(url=url, data=data)
        return fake_response(200, text='{"response_code": 202}')

    monkeypatch.setattr(requests, 'post', fake_post)

    assert sms_service.send_sms('01712345678', 'hello', event='manual') is True
    assert sent['data'] == {'api_key': 'sms-key', 'senderid': 'DOKAN', 'number': '01712345678', 'message': 'hello'}
    log = SmsLog.query.one()
    assert log.success is True
    assert log.event == 'manual'


def test_gateway_failure_is_logged_not_raised(app, sms_enabled, monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError('gateway down')

    monkeypatch.setattr(requests, 'post', boom)

    assert sms_service.send_sms('01712345678', 'hello') is False
    assert SmsLog.query.one().success is False


def test_order_placed_sms(client, sms_enabled, make_product, shipping, monkeypatch, fake_response):
    sms_service.ensure_default_templates()
    messages = []
    monkeypatch.setattr(requests, 'post',
                        lambda url, data=None, timeout=None: messages.append(data) or fake_response(200, text='ok'))
    product = make_product(price=500)

    number = client.post('/api/v1/checkout/place-order', json={
        'items': [{'id': product.id, 'quantity': 1}],
        'shipping': shipping,
    }).get_json()['data']['orderNumber']

    assert len(messages) == 1
    assert messages[0]['message'] == f'Dear Rahim Uddin, your order {number} of ৳600 has been placed. Thank you!'
    assert SmsLog.query.one().event == 'order_placed'


def test_inactive_template_is_not_sent(app, sms_enabled):
    sms_service.ensure_default_templates()
    template = SmsTemplate.query.filter_by(event='order_placed').one()
    template.is_active = False
    db.session.commit()

    assert sms_service.notify_order_event(object(), 'order_placed') is False


def test_sms_templates_admin(admin_client):
    response = admin_client.get('/admin/sms/templates')

    events = [template['event'] for template in response.get_json()['data']['templates']]
    assert 'order_placed' in events

    response = admin_client.post('/admin/sms/templates', json={'event': 'order_placed', 'body': 'dup'})
    assert response.status_code == 400

    response = admin_client.post('/admin/sms/send', json={'phone': '123', 'message': 'hi'})
    assert response.status_code == 400
