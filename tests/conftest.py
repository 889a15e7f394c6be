from datetime import timedelta
from decimal import Decimal

import pytest

from sweetshop import accounts, create_app
from sweetshop.models import ROLE_ADMIN, Sweet, db

JWT_TEST_SECRET = 'test-jwt-secret-with-enough-bytes-for-hs256'


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'sweetshop.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'check_same_thread': False, 'timeout': 30}},
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SECRET_KEY': 'test-secret',
        'JWT_SECRET_KEY': JWT_TEST_SECRET,
        'JWT_ACCESS_TOKEN_EXPIRES': timedelta(days=7),
        'LOG_LEVEL': 'DEBUG',
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_token(app, client):
    with app.app_context():
        accounts.register('admin', 'admin-pass', role=ROLE_ADMIN)
    resp = client.post('/api/auth/login', json={'username': 'admin', 'password': 'admin-pass'})
    return resp.get_json()['token']


@pytest.fixture
def user_token(client):
    resp = client.post('/api/auth/register', json={'username': 'alice', 'password': 'alice-pass'})
    return resp.get_json()['token']


@pytest.fixture
def make_sweet(app):
    def _make(name='Dark Truffle', category='chocolates', price='2.50', quantity=3, **extra):
        with app.app_context():
            sweet = Sweet(name=name, category=category, price=Decimal(price),
                          quantity=quantity, **extra)
            db.session.add(sweet)
            db.session.commit()
            return sweet.id
    return _make


@pytest.fixture
def stock_of(app):
    def _stock(sweet_id):
        with app.app_context():
            return db.session.get(Sweet, sweet_id).quantity
    return _stock
