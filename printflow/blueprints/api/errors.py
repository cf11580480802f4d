import traceback
from flask import jsonify, current_app

from printflow.extensions import db
from printflow.errors import PrintflowError
from . import api_bp
from .utils import domain_error_response

# app_errorhandler covers every blueprint, not only the API

@api_bp.app_errorhandler(PrintflowError)
def printflow_error(error):
    return domain_error_response(error)

@api_bp.app_errorhandler(400)
def bad_request_error(error):
    return jsonify({'status': 'error',
                    'message': getattr(error, 'description', 'Bad request.')}), 400

@api_bp.app_errorhandler(403)
def forbidden_error(error):
    return jsonify({'status': 'error',
                    'message': getattr(error, 'description', 'You do not have permission for this action.')}), 403

@api_bp.app_errorhandler(404)
def not_found_error(error):
    return jsonify({'status': 'error',
                    'message': getattr(error, 'description', 'Not found.')}), 404

@api_bp.app_errorhandler(500)
def internal_error(error):
    db.session.rollback()
    current_app.logger.error(f"Internal Server Error: {error}")
    traceback.print_exc()
    return jsonify({'status': 'error', 'message': 'Internal server error'}), 500
