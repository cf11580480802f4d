from flask import jsonify, abort
from flask_login import current_user

from printflow.services.product_service import ProductService
from printflow.services.cart_service import CartService
from . import api_bp
from .utils import admin_required, json_body, _parse_int

def _quote_payload(quote):
    return {
        'product_id': quote['product'].id,
        'quantity': quote['quantity'],
        'options': [{'id': o.id, 'menu': o.menu.name, 'option_name': o.option_name,
                     'price': float(o.price)} for o in quote['options']],
        'discount_code': quote['discount_code'].code if quote['discount_code'] else None,
        'subtotal': float(quote['subtotal']),
        'discount': float(quote['discount']),
        'total': float(quote['total']),
    }

@api_bp.route('/api/products', methods=['GET'])
def list_products():
    products = ProductService.list_products()
    return jsonify({'status': 'success', 'products': [p.to_dict(with_menus=False) for p in products]})

@api_bp.route('/api/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    detail = ProductService.get_product_detail(product_id)
    if not detail:
        abort(404, description='Product not found.')
    return jsonify({'status': 'success', 'product': detail})

@api_bp.route('/api/products', methods=['POST'])
@admin_required
def create_product():
    data = json_body()
    product = ProductService.create_product(
        name=data.get('name'),
        product_type=data.get('type'),
        menus=data.get('menus') or [],
        base_price=data.get('base_price'),
        image_url=data.get('image_url'),
    )
    return jsonify({'status': 'success', 'product': product.to_dict()}), 201

@api_bp.route('/api/products/<int:product_id>', methods=['DELETE'])
@admin_required
def delete_product(product_id):
    ProductService.delete_product(product_id)
    return jsonify({'status': 'success', 'message': 'Product deleted.'})

@api_bp.route('/api/products/<int:product_id>/quote', methods=['POST'])
def quote_product(product_id):
    data = json_body()
    quote = CartService.quote(
        product_id,
        data.get('selected_option_ids') or [],
        data.get('quantity', 1),
        data.get('discount_code'),
    )
    return jsonify({'status': 'success', 'quote': _quote_payload(quote)})

@api_bp.route('/api/cart', methods=['POST'])
def add_to_cart():
    data = json_body()
    product_id = _parse_int(data.get('product_id'))
    if not product_id:
        return jsonify({'success': False, 'error': 'product_id is required.'}), 400

    user_id = current_user.id if current_user.is_authenticated else None
    order, quote = CartService.add_to_cart(
        product_id,
        data.get('selected_option_ids') or [],
        data.get('quantity', 1),
        data.get('discount_code'),
        user_id=user_id,
    )
    return jsonify({
        'success': True,
        'order_id': order.id,
        'message': 'Added to cart successfully!',
        'quote': _quote_payload(quote),
    }), 201
