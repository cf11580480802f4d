from decimal import Decimal

import pytest

from printflow.extensions import db, cache
from printflow.models import DiscountCode, Order, OrderItemOption
from printflow.errors import DiscountInvalidError, NotFoundError, ValidationError
from printflow.services.cart_service import CartService
from printflow.services.discount_service import DiscountService
from printflow.services.product_service import ProductService

from conftest import option_id


def selection(product, size='Small', material='Vinyl'):
    return [option_id(product, 'Size', size), option_id(product, 'Material', material)]


def test_quote_without_code(product):
    quote = CartService.quote(product.id, selection(product), 2)
    assert quote['subtotal'] == Decimal('30.00')
    assert quote['discount'] == Decimal('0.00')
    assert quote['total'] == Decimal('30.00')
    assert [o.option_name for o in quote['options']] == ['Small', 'Vinyl']


def test_quote_with_code(product, make_code):
    make_code()
    quote = CartService.quote(product.id, selection(product, 'Large', 'Paper'), 1, code='save10')
    assert quote['subtotal'] == Decimal('22.00')
    assert quote['discount'] == Decimal('2.20')
    assert quote['total'] == Decimal('19.80')


def test_quote_requires_one_option_per_menu(product):
    with pytest.raises(ValidationError):
        CartService.quote(product.id, [option_id(product, 'Size', 'Small')], 1)

    both_sizes = [option_id(product, 'Size', 'Small'), option_id(product, 'Size', 'Large'),
                  option_id(product, 'Material', 'Vinyl')]
    with pytest.raises(ValidationError):
        CartService.quote(product.id, both_sizes, 1)

    with pytest.raises(ValidationError):
        CartService.quote(product.id, selection(product) + [9999], 1)


def test_quote_rejects_bad_quantity_and_product(product):
    with pytest.raises(ValidationError):
        CartService.quote(product.id, selection(product), 0)
    with pytest.raises(NotFoundError):
        CartService.quote(9999, [], 1)


def test_add_to_cart_records_order_and_redeems(product, make_code):
    code = make_code()
    order, quote = CartService.add_to_cart(product.id, selection(product), 2, code='SAVE10')

    assert order.price == Decimal('27.00')
    assert order.quantity == 2
    assert order.type == product.type
    assert order.timeline_position is None
    assert order.discount_code_id == code.id
    assert order.title == 'Vinyl Banner'
    assert len(order.items[0].options) == 2
    assert db.session.get(DiscountCode, code.id).times_used == 1


def test_add_to_cart_is_atomic_when_redeem_fails(product, make_code, monkeypatch):
    make_code()

    def refuse(code_id):
        raise DiscountInvalidError('This discount code has reached its usage limit.', 'exhausted')

    monkeypatch.setattr(DiscountService, 'redeem', staticmethod(refuse))
    with pytest.raises(DiscountInvalidError):
        CartService.add_to_cart(product.id, selection(product), 1, code='SAVE10')

    assert Order.query.count() == 0
    assert OrderItemOption.query.count() == 0


def test_cart_api(client, product, make_code):
    make_code(use_limit=1)
    payload = {'product_id': product.id, 'selected_option_ids': selection(product),
               'quantity': 1, 'discount_code': 'save10'}

    resp = client.post('/api/cart', json=payload)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['success'] is True
    assert body['message'] == 'Added to cart successfully!'
    assert body['quote']['total'] == 13.5

    resp = client.post('/api/cart', json=payload)
    assert resp.status_code == 400
    assert resp.get_json()['reason'] == 'exhausted'
    assert Order.query.count() == 1


def test_cart_api_requires_product(client):
    resp = client.post('/api/cart', json={})
    assert resp.status_code == 400
    assert resp.get_json()['success'] is False


def test_quote_api(client, product):
    resp = client.post(f'/api/products/{product.id}/quote',
                       json={'selected_option_ids': selection(product, 'Large'), 'quantity': 3})
    assert resp.status_code == 200
    assert resp.get_json()['quote']['subtotal'] == 75.0


def test_product_detail_is_cached_and_invalidated(admin_client, product):
    resp = admin_client.get(f'/api/products/{product.id}')
    assert resp.status_code == 200
    assert resp.get_json()['product']['name'] == 'Vinyl Banner'
    assert cache.get(f'product_detail_{product.id}') is not None

    assert admin_client.delete(f'/api/products/{product.id}').status_code == 200
    assert cache.get(f'product_detail_{product.id}') is None
    assert admin_client.get(f'/api/products/{product.id}').status_code == 404


def test_create_product_via_api(admin_client):
    resp = admin_client.post('/api/products', json={
        'name': 'Oak Plaque', 'type': 'Wood',
        'menus': [{'name': 'Finish', 'options': [{'option_name': 'Oiled', 'price': 12}]}],
    })
    assert resp.status_code == 201
    assert [p['name'] for p in admin_client.get('/api/products').get_json()['products']] == ['Oak Plaque']

    resp = admin_client.post('/api/products', json={'name': 'Empty', 'type': 'Wood',
                                                    'menus': [{'name': 'Finish', 'options': []}]})
    assert resp.status_code == 400


def test_create_product_needs_admin(staff_client):
    assert staff_client.post('/api/products', json={'name': 'X', 'type': 'Wood'}).status_code == 403


def test_create_product_rejects_negative_price(app):
    with pytest.raises(ValidationError):
        ProductService.create_product('Sticker', 'Digital', [
            {'name': 'Size', 'options': [{'option_name': 'A6', 'price': -1}]},
        ])


def test_create_product_rejects_non_finite_price(app):
    with pytest.raises(ValidationError):
        ProductService.create_product('Sticker', 'Digital', [
            {'name': 'Size', 'options': [{'option_name': 'A6', 'price': 'NaN'}]},
        ])
    with pytest.raises(ValidationError):
        ProductService.create_product('Sticker', 'Digital', base_price='Infinity')
