import itertools
import pytest

from app import create_app
from config import TestingConfig
from models import db
from models.landing_page import LandingPage
from models.product import Product, Category
from models.user import User, Role
from utils.auth import hash_password

_counter = itertools.count(1)

@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post('/admin/auth/login', json={
        'username': app.config['ADMIN_USERNAME'],
        'password': app.config['ADMIN_PASSWORD'],
    })
    assert response.status_code == 200
    return client

@pytest.fixture
def editor_client(app):
    """Logged in as an Editor: landing pages yes, orders no"""
    role = Role.query.filter_by(name=Role.EDITOR).first()
    db.session.add(User(username='editor', email='editor@test.local',
                        password_hash=hash_password('editor-pass-123'), role_id=role.id))
    db.session.commit()
    client = app.test_client()
    client.post('/admin/auth/login', json={'username': 'editor', 'password': 'editor-pass-123'})
    return client

@pytest.fixture
def make_category(app):
    def _make(name='Shoes', **kwargs):
        n = next(_counter)
        category = Category(name=name, slug=kwargs.pop('slug', f'category-{n}'), **kwargs)
        db.session.add(category)
        db.session.commit()
        return category
    return _make

@pytest.fixture
def make_product(app):
    def _make(name='Leather Sandal', price=900, **kwargs):
        n = next(_counter)
        kwargs.setdefault('stock', 20)
        kwargs.setdefault('images', [f'https://cdn.test/p{n}.jpg'])
        product = Product(name=name, slug=kwargs.pop('slug', f'product-{n}'), price=price, **kwargs)
        db.session.add(product)
        db.session.commit()
        return product
    return _make

@pytest.fixture
def make_page(app):
    def _make(sections=None, published=True, **kwargs):
        n = next(_counter)
        page = LandingPage(
            title=kwargs.pop('title', 'Eid Offer'),
            slug=kwargs.pop('slug', f'eid-offer-{n}'),
            sections=sections if sections is not None else [],
            is_active=published,
            is_published=published,
            **kwargs
        )
        db.session.add(page)
        db.session.commit()
        return page
    return _make

@pytest.fixture
def shipping():
    return {
        'name': 'Rahim Uddin',
        'phone': '01712345678',
        'street': 'House 12, Road 5, Dhanmondi',
        'city': 'Dhaka',
        'district': 'Dhaka',
    }

class FakeResponse:
    """Stand-in for requests.Response in patched HTTP calls"""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ('' if payload is None else str(payload))

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

@pytest.fixture
def fake_response():
    return FakeResponse
