from flask import Blueprint, jsonify, current_app
from flask_login import login_user, logout_user, current_user, login_required
from flask_wtf.csrf import generate_csrf

from printflow.services.user_service import UserService
from .api.utils import json_body

auth_bp = Blueprint('auth', __name__)

@auth_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})

@auth_bp.route('/login', methods=['POST'])
def login():
    if current_user.is_authenticated:
        return jsonify({'status': 'success', 'user': current_user.to_dict()})

    data = json_body()
    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        return jsonify({'status': 'error', 'message': 'Email and password are required.'}), 400

    user = UserService.authenticate(email, password)
    if not user:
        current_app.logger.info(f"Failed login for {email}")
        return jsonify({'status': 'error', 'message': 'Invalid email or password.'}), 401

    login_user(user, remember=bool(data.get('remember')))
    return jsonify({'status': 'success', 'user': user.to_dict()})

@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'status': 'success', 'message': 'Logged out.'})

@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({'status': 'success', 'user': current_user.to_dict()})
