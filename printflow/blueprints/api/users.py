from flask import jsonify
from flask_login import login_required, current_user

from printflow.errors import PrintflowError
from printflow.services.user_service import UserService
from . import api_bp
from .utils import admin_required, json_body, _parse_int

@api_bp.route('/api/users', methods=['GET'])
@login_required
def list_users():
    users = UserService.list_users()
    return jsonify({'status': 'success', 'users': [u.to_dict() for u in users]})

@api_bp.route('/api/create-user', methods=['POST'])
@admin_required
def create_user():
    data = json_body()
    try:
        user = UserService.create_user(
            email=data.get('email'),
            password=data.get('password'),
            name=data.get('name'),
            role=data.get('role'),
            user_type=data.get('type'),
        )
    except PrintflowError as e:
        return jsonify({'error': e.message}), 400
    return jsonify({'user': user.to_dict()}), 200

@api_bp.route('/api/delete-user', methods=['DELETE'])
@admin_required
def delete_user():
    data = json_body()
    user_id = _parse_int(data.get('userId'))
    if not user_id:
        return jsonify({'error': 'User ID is required'}), 400
    if user_id == current_user.id:
        return jsonify({'error': 'You cannot delete your own account'}), 400

    try:
        UserService.delete_user(user_id)
    except PrintflowError as e:
        return jsonify({'error': e.message}), 400
    return jsonify({'message': 'User deleted successfully'}), 200
