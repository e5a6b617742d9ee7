"""
Student profile routes.
"""

from flask import Blueprint, jsonify
from flask_login import login_required

from decorators import parent_required
from services.students import create_student, update_student, delete_student, list_students, student_to_dict
from .utils import current_context, request_data, respond

bp = Blueprint('students', __name__)


@bp.route('/students')
@login_required
def students_list():
    students = list_students(current_context())
    return jsonify({'success': True, 'students': [student_to_dict(s) for s in students]})


@bp.route('/students', methods=['POST'])
@login_required
@parent_required
def students_create():
    data = request_data()
    result = create_student(
        current_context(),
        data.get('name'),
        grade_level=data.get('grade_level'),
        email=data.get('email'),
        password=data.get('password')
    )
    return respond(result)


@bp.route('/students/<int:student_id>', methods=['PATCH'])
@login_required
@parent_required
def student_update(student_id):
    data = request_data()
    return respond(update_student(current_context(), student_id, data.get('name'), data.get('grade_level')))


@bp.route('/students/<int:student_id>', methods=['DELETE'])
@login_required
@parent_required
def student_delete(student_id):
    return respond(delete_student(current_context(), student_id))
