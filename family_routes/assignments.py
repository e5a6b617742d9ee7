"""
Assignment routes: creation, status changes, grading, comments, CSV import.
"""

from flask import Blueprint, request, jsonify
from flask_login import login_required

from decorators import parent_required
from error_handler import ValidationError, NotFoundError, error_result
from services.assignments import (
    create_assignment, update_assignment, update_assignment_status, grade_assignment,
    add_comment, delete_assignment, list_assignments, get_assignment, own_student_profile,
    assignment_to_dict
)
from services.activity_log import get_activity_log
from services.csv_import import import_assignments_csv
from .utils import current_context, request_data, respond

bp = Blueprint('assignments', __name__)


@bp.route('/assignments')
@login_required
def assignments_list():
    ctx = current_context()
    assignments = list_assignments(
        ctx,
        student_id=request.args.get('student_id', type=int),
        status=request.args.get('status'),
        subject_id=request.args.get('subject_id', type=int)
    )
    return jsonify({'success': True, 'assignments': [assignment_to_dict(a) for a in assignments]})


@bp.route('/assignments', methods=['POST'])
@login_required
@parent_required
def assignments_create():
    return respond(create_assignment(current_context(), request_data(list_fields=('student_ids',))))


@bp.route('/assignments/<int:assignment_id>')
@login_required
def assignment_detail(assignment_id):
    ctx = current_context()
    assignment = get_assignment(ctx, assignment_id)
    if ctx.is_student:
        profile = own_student_profile(ctx)
        if not profile or profile.id != assignment.student_id:
            raise NotFoundError("Assignment not found")
    data = assignment_to_dict(assignment)
    data['comments'] = [
        {
            'id': c.id,
            'content': c.content,
            'author_name': c.author_name,
            'author_role': c.author_role,
            'created_at': c.created_at.isoformat(),
        }
        for c in assignment.comments
    ]
    return jsonify({'success': True, 'assignment': data})


@bp.route('/assignments/<int:assignment_id>', methods=['PATCH'])
@login_required
@parent_required
def assignment_update(assignment_id):
    return respond(update_assignment(current_context(), assignment_id, request_data()))


@bp.route('/assignments/<int:assignment_id>', methods=['DELETE'])
@login_required
@parent_required
def assignment_delete(assignment_id):
    return respond(delete_assignment(current_context(), assignment_id))


@bp.route('/assignments/<int:assignment_id>/status', methods=['POST'])
@login_required
def assignment_status(assignment_id):
    data = request_data()
    result = update_assignment_status(
        current_context(),
        assignment_id,
        data.get('status'),
        comment=data.get('comment'),
        grade_label=data.get('grade_label'),
        grade_value=data.get('grade_value')
    )
    return respond(result)


@bp.route('/assignments/<int:assignment_id>/grade', methods=['POST'])
@login_required
@parent_required
def assignment_grade(assignment_id):
    data = request_data()
    return respond(grade_assignment(current_context(), assignment_id, data.get('grade_label')))


@bp.route('/assignments/<int:assignment_id>/comments', methods=['POST'])
@login_required
def assignment_comment(assignment_id):
    data = request_data()
    return respond(add_comment(current_context(), assignment_id, data.get('content')))


@bp.route('/assignments/<int:assignment_id>/activity')
@login_required
@parent_required
def assignment_activity(assignment_id):
    ctx = current_context()
    get_assignment(ctx, assignment_id)
    entries = get_activity_log(ctx.family_id, assignment_id=assignment_id)
    return jsonify({
        'success': True,
        'activity': [
            {
                'action': e.action,
                'details': e.details,
                'user_name': e.user_name,
                'timestamp': e.timestamp.isoformat(),
            }
            for e in entries
        ],
    })


@bp.route('/assignments/import', methods=['POST'])
@login_required
@parent_required
def assignments_import():
    """Import assignments from an uploaded CSV file or a raw CSV body."""
    upload = request.files.get('csv_file')
    if upload is not None:
        if not upload.filename.lower().endswith('.csv'):
            return respond(error_result(ValidationError('Invalid file type. Please upload a CSV file.')))
        try:
            text = upload.stream.read().decode('utf-8-sig')
        except UnicodeDecodeError:
            return respond(error_result(ValidationError('The file must be UTF-8 encoded text.')))
    else:
        text = request.get_data(as_text=True)
    return respond(import_assignments_csv(current_context(), text))
