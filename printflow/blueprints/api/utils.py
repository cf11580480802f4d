from functools import wraps
from datetime import datetime, date
from flask import abort, jsonify, request, current_app
from flask_login import current_user, login_required

def admin_required(f):
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin:
            abort(403, description="Administrator permission is required for this action.")
        return f(*args, **kwargs)
    return decorated_function

def json_body():
    return request.get_json(silent=True) or {}

def error_response(message, status_code=400, **extra):
    payload = {'status': 'error', 'message': message}
    payload.update(extra)
    return jsonify(payload), status_code

def domain_error_response(e):
    current_app.logger.info(f"{e.__class__.__name__}: {e.message}")
    extra = {}
    if getattr(e, 'reason', None):
        extra['reason'] = e.reason
    return error_response(e.message, e.status_code, **extra)

def _parse_iso_date_string(date_str):
    if not date_str:
        return None
    if isinstance(date_str, date):
        return date_str
    try:
        return datetime.strptime(str(date_str).split('T')[0], '%Y-%m-%d').date()
    except ValueError:
        current_app.logger.warning(f"Could not parse date string {date_str}")
        return None

def _parse_iso_datetime(value):
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        current_app.logger.warning(f"Could not parse datetime string {value}")
        return None
    # Stored as naive UTC
    if parsed.tzinfo is not None:
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    return parsed

def _parse_int(value):
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

def target_date_arg(source=None):
    """Date the timeline is viewed for; defaults to today."""
    source = source if source is not None else request.args
    raw = source.get('date')
    if not raw:
        return date.today(), None
    parsed = _parse_iso_date_string(raw)
    if not parsed:
        return None, error_response('Invalid date. Use YYYY-MM-DD.', 400)
    return parsed, None
