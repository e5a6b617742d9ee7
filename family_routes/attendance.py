"""
Attendance log routes. Parents only.
"""

from flask import Blueprint, request, jsonify
from flask_login import login_required

from decorators import parent_required
from services.attendance import (
    create_attendance_log, update_attendance_log, delete_attendance_log,
    list_attendance_logs, attendance_to_dict
)
from .utils import current_context, request_data, respond

bp = Blueprint('attendance', __name__)


@bp.route('/attendance')
@login_required
@parent_required
def attendance_list():
    logs = list_attendance_logs(
        current_context(),
        student_id=request.args.get('student_id', type=int),
        date_from=request.args.get('from'),
        date_to=request.args.get('to')
    )
    return jsonify({'success': True, 'logs': [attendance_to_dict(log) for log in logs]})


@bp.route('/attendance', methods=['POST'])
@login_required
@parent_required
def attendance_create():
    return respond(create_attendance_log(current_context(), request_data()))


@bp.route('/attendance/<int:log_id>', methods=['PUT'])
@login_required
@parent_required
def attendance_update(log_id):
    return respond(update_attendance_log(current_context(), log_id, request_data()))


@bp.route('/attendance/<int:log_id>', methods=['DELETE'])
@login_required
@parent_required
def attendance_delete(log_id):
    return respond(delete_attendance_log(current_context(), log_id))
