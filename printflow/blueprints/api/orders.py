from flask import request, jsonify, abort
from flask_login import login_required, current_user

from printflow.services.order_service import OrderGateway
from printflow.services.tracking import track_order as lookup_order
from printflow.constants import PrintType
from . import api_bp
from .utils import json_body, _parse_int, _parse_iso_datetime

@api_bp.route('/api/create-order', methods=['POST'])
@login_required
def create_order():
    """Staff job entry. New orders always start in the unplaced queue."""
    data = json_body()
    orderno = data.get('orderno')
    customer_name = (data.get('customer_name') or '').strip()
    order_type = data.get('type')
    raw_deadline = data.get('deadline')

    if not orderno or not customer_name or not order_type:
        return jsonify({'error': 'orderno, customer_name and type are required'}), 400
    if order_type not in PrintType.ALL:
        return jsonify({'error': f'type must be one of {", ".join(PrintType.ALL)}'}), 400

    deadline = _parse_iso_datetime(raw_deadline)
    if raw_deadline and deadline is None:
        return jsonify({'error': 'deadline must be an ISO date/time'}), 400

    user_id = _parse_int(data.get('user_id')) or current_user.id

    result = OrderGateway.create_order(user_id, orderno, customer_name, order_type, deadline)
    if result['status'] != 'success':
        return jsonify({'error': result['message']}), 500

    return jsonify({'success': True, 'data': [result['order'].to_dict(with_items=False)]})

@api_bp.route('/api/orders', methods=['GET'])
@login_required
def list_orders():
    result = OrderGateway.fetch_orders()
    if result['status'] != 'success':
        return jsonify({'status': 'error', 'message': result['message']}), 500

    status_filter = request.args.get('status')
    orders = result['orders']
    if status_filter:
        orders = [o for o in orders if o.status == status_filter]
    return jsonify({'status': 'success', 'orders': [o.to_dict() for o in orders]})

@api_bp.route('/api/orders/<int:order_id>', methods=['GET'])
@login_required
def get_order(order_id):
    detail = OrderGateway.get_order_detail(order_id)
    if not detail:
        abort(404, description='Order not found.')
    return jsonify({'status': 'success', 'order': detail})

@api_bp.route('/api/track-order', methods=['GET'])
def track_order():
    orderno = request.args.get('orderno', '').strip()
    if not orderno:
        return jsonify({'status': 'error', 'message': 'Please enter an order number'}), 400

    result = lookup_order(orderno)
    return jsonify({'status': 'success', **result.to_dict()})
