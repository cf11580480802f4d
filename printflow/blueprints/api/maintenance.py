from datetime import datetime
from flask import jsonify
from sqlalchemy import text

from printflow.models import db
from . import api_bp

@api_bp.route('/health', methods=['GET'])
def health_check():
    try:
        db.session.execute(text('SELECT 1'))
        return jsonify({'status': 'ok', 'timestamp': datetime.now().isoformat()}), 200
    except Exception as e:
        return jsonify({'status': 'error', 'message': str(e)}), 500
