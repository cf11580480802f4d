import os

# Config reads these at import time
os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('CACHE_TYPE', 'SimpleCache')

from datetime import date, datetime, timedelta

import pytest

from printflow import create_app
from printflow.config import Config
from printflow.extensions import db as _db
from printflow.constants import Role, PrintType, DiscountType, DiscountMode
from printflow.services.user_service import UserService
from printflow.services.product_service import ProductService
from printflow.services.discount_service import DiscountService

PASSWORD = 'secret-pass'


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
    CACHE_TYPE = 'SimpleCache'
    CELERY_BROKER_URL = 'memory://'
    CELERY_RESULT_BACKEND = 'cache+memory://'
    CELERY_TASK_ALWAYS_EAGER = True


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def file_app(tmp_path):
    """App on a SQLite file, so each thread gets its own connection."""
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'printflow.db'}"

    app = create_app(FileConfig)
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    return UserService.create_user('admin@shop.test', PASSWORD, 'Alice Admin', Role.ADMIN)


@pytest.fixture
def designer(app):
    return UserService.create_user('designer@shop.test', PASSWORD, 'Dana Designer', Role.DESIGNER)


@pytest.fixture
def operator(app):
    return UserService.create_user('operator@shop.test', PASSWORD, 'Omar Operator', Role.OPERATOR, PrintType.ROLAND)


def login(client, user, password=PASSWORD):
    resp = client.post('/login', json={'email': user.email, 'password': password})
    assert resp.status_code == 200, resp.get_json()
    return resp


@pytest.fixture
def admin_client(client, admin):
    login(client, admin)
    return client


@pytest.fixture
def staff_client(client, designer):
    login(client, designer)
    return client


@pytest.fixture
def product(app):
    return ProductService.create_product(
        name='Vinyl Banner',
        product_type=PrintType.SIGN,
        menus=[
            {'name': 'Size', 'options': [
                {'option_name': 'Small', 'price': '10.00'},
                {'option_name': 'Large', 'price': '20.00'},
            ]},
            {'name': 'Material', 'options': [
                {'option_name': 'Vinyl', 'price': '5.00'},
                {'option_name': 'Paper', 'price': '2.00'},
            ]},
        ],
    )


def option_id(product, menu_name, option_name):
    for menu in product.menus:
        if menu.name == menu_name:
            for opt in menu.options:
                if opt.option_name == option_name:
                    return opt.id
    raise KeyError((menu_name, option_name))


@pytest.fixture
def make_code(app):
    def _make(code='SAVE10', discount_type=DiscountType.PERCENTAGE, amount=10, use_limit=5,
              expires_in_days=30, mode=DiscountMode.MANUAL):
        return DiscountService.create_code(
            code=code,
            discount_type=discount_type,
            mode=mode,
            amount=amount,
            expiration_date=datetime.utcnow() + timedelta(days=expires_in_days),
            use_limit=use_limit,
        )
    return _make


DAY = date(2024, 6, 1)
NEXT_DAY = date(2024, 6, 2)
