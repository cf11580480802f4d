from decimal import Decimal, InvalidOperation
from datetime import datetime
from flask import jsonify

from printflow.errors import ValidationError
from printflow.services.discount_service import DiscountService
from printflow.services.pricing import calculate_discount, to_money
from printflow.celery_tasks import task_deactivate_expired_codes
from . import api_bp
from .utils import admin_required, json_body, error_response, _parse_iso_date_string

@api_bp.route('/api/discount-codes', methods=['GET'])
@admin_required
def list_discount_codes():
    codes, stats = DiscountService.list_codes()
    return jsonify({'status': 'success', 'codes': [c.to_dict() for c in codes], 'stats': stats})

@api_bp.route('/api/discount-codes', methods=['POST'])
@admin_required
def create_discount_code():
    data = json_body()
    expiration = _parse_iso_date_string(data.get('expiration_date'))
    if not expiration:
        return error_response('expiration_date is required (YYYY-MM-DD).', 400)

    row = DiscountService.create_code(
        code=data.get('code'),
        discount_type=data.get('type'),
        mode=data.get('mode'),
        amount=data.get('amount'),
        expiration_date=datetime.combine(expiration, datetime.min.time()),
        use_limit=data.get('use_limit', 1),
    )
    return jsonify({'status': 'success', 'code': row.to_dict()}), 201

@api_bp.route('/api/discount-codes/<int:code_id>/toggle', methods=['POST'])
@admin_required
def toggle_discount_code(code_id):
    row = DiscountService.toggle_active(code_id)
    return jsonify({'status': 'success', 'code': row.to_dict()})

@api_bp.route('/api/discount-codes/<int:code_id>', methods=['DELETE'])
@admin_required
def delete_discount_code(code_id):
    data = json_body()
    detached = DiscountService.delete_code(code_id, confirm=data.get('confirm') is True)
    return jsonify({'status': 'success', 'message': 'Discount code deleted.', 'detached_orders': detached})

@api_bp.route('/api/discount-codes/expire', methods=['POST'])
@admin_required
def expire_discount_codes():
    task = task_deactivate_expired_codes.delay()
    return jsonify({'status': 'success', 'task_id': task.id}), 202

@api_bp.route('/api/discount-codes/apply', methods=['POST'])
def apply_discount_code():
    """Checks a code against a subtotal without using it up."""
    data = json_body()
    try:
        subtotal = Decimal(str(data.get('subtotal', '0')))
    except (InvalidOperation, ValueError):
        raise ValidationError('subtotal must be a number.')
    if not subtotal.is_finite():
        raise ValidationError('subtotal must be a number.')
    subtotal = to_money(subtotal)
    if subtotal < 0:
        raise ValidationError('subtotal cannot be negative.')

    row = DiscountService.validate(data.get('code'))
    discount = calculate_discount(subtotal, row.type, row.amount)
    return jsonify({
        'status': 'success',
        'code': row.code,
        'discount_code_id': row.id,
        'type': row.type,
        'amount': float(row.amount),
        'subtotal': float(subtotal),
        'discount': float(discount),
        'total': float(max(Decimal('0.00'), subtotal - discount)),
    })
