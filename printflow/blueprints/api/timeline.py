import traceback
from flask import request, jsonify, current_app, send_file
from flask_login import login_required

from printflow.extensions import db
from printflow.models import User
from printflow.services.timeline import TimelineViewModel, CommandResult
from printflow.services.excel import build_timeline_frame, timeline_to_xlsx
from . import api_bp
from .utils import json_body, error_response, target_date_arg, _parse_int

def _load_view_model(day):
    vm = TimelineViewModel(tick_width=current_app.config.get('TIMELINE_TICK_WIDTH', 150))
    return vm.load(day)

def _run_command(vm, command):
    """Persist failures roll the projection back so the response matches the store."""
    if not command.ok:
        command.rollback()
        status_code = 400 if command.reason == CommandResult.REJECTED else 500
        return jsonify(command.to_dict()), status_code
    result = command.to_dict()
    result['timeline'] = vm.to_dict()
    return jsonify(result)

@api_bp.route('/api/timeline', methods=['GET'])
@login_required
def get_timeline():
    day, err = target_date_arg()
    if err:
        return err

    types = [t for t in request.args.get('types', '').split(',') if t]
    vm = _load_view_model(day)
    vm.filter_by_type(types)
    return jsonify({'status': 'success', 'timeline': vm.to_dict()})

@api_bp.route('/api/timeline/move', methods=['POST'])
@login_required
def move_order():
    data = json_body()
    day, err = target_date_arg(data)
    if err:
        return err

    order_id = _parse_int(data.get('order_id'))
    tick_id = data.get('tick_id')
    if not order_id or not tick_id:
        return error_response('order_id and tick_id are required.', 400)

    vm = _load_view_model(day)
    return _run_command(vm, vm.move_to_tick(order_id, tick_id))

@api_bp.route('/api/timeline/place', methods=['POST'])
@login_required
def place_order():
    """Click-to-place: drop a queued order on the least busy tick of the day."""
    data = json_body()
    day, err = target_date_arg(data)
    if err:
        return err

    order_id = _parse_int(data.get('order_id'))
    if not order_id:
        return error_response('order_id is required.', 400)

    vm = _load_view_model(day)
    return _run_command(vm, vm.move_to_least_loaded_tick(order_id))

@api_bp.route('/api/timeline/complete', methods=['POST'])
@login_required
def complete_order():
    data = json_body()
    day, err = target_date_arg(data)
    if err:
        return err

    order_id = _parse_int(data.get('order_id'))
    if not order_id:
        return error_response('order_id is required.', 400)

    vm = _load_view_model(day)
    return _run_command(vm, vm.mark_complete(order_id))

@api_bp.route('/api/timeline/assign', methods=['POST'])
@login_required
def assign_order():
    data = json_body()
    day, err = target_date_arg(data)
    if err:
        return err

    order_id = _parse_int(data.get('order_id'))
    if not order_id:
        return error_response('order_id is required.', 400)

    # null/missing user_id clears the assignment
    raw_user = data.get('user_id')
    user_id = _parse_int(raw_user)
    if raw_user not in (None, '') and user_id is None:
        return error_response('user_id must be an integer or null.', 400)
    if user_id is not None and not db.session.get(User, user_id):
        return error_response('User not found.', 404)

    vm = _load_view_model(day)
    return _run_command(vm, vm.assign(order_id, user_id))

@api_bp.route('/api/timeline/search', methods=['GET'])
@login_required
def search_order():
    day, err = target_date_arg()
    if err:
        return err

    vm = _load_view_model(day)
    result = vm.search(request.args.get('orderno', ''))
    return jsonify({'status': 'success', **result.to_dict()})

@api_bp.route('/api/timeline/export', methods=['GET'])
@login_required
def export_timeline():
    day, err = target_date_arg()
    if err:
        return err

    try:
        vm = _load_view_model(day)
        types = [t for t in request.args.get('types', '').split(',') if t]
        vm.filter_by_type(types)
        users_by_id = {u.id: u for u in User.query.all()}

        df = build_timeline_frame(vm, users_by_id)
        output = timeline_to_xlsx(df, sheet_name=day.isoformat())

        filename = f"timeline_{day.strftime('%Y%m%d')}.xlsx"
        return send_file(output, as_attachment=True, download_name=filename,
                         mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
    except Exception as e:
        current_app.logger.error(f"Timeline export error: {e}")
        traceback.print_exc()
        return error_response(f'Export failed: {e}', 500)
