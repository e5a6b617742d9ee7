"""
Subject, weight and template routes.
"""

from flask import Blueprint, jsonify
from flask_login import login_required

from decorators import parent_required
from services.subjects import (
    create_subject, update_subject, delete_subject, update_subject_weights, list_subjects,
    subject_to_dict, create_template, update_template, delete_template, list_templates,
    template_to_dict
)
from .utils import current_context, request_data, respond

bp = Blueprint('subjects', __name__)


@bp.route('/subjects')
@login_required
def subjects_list():
    subjects = list_subjects(current_context())
    return jsonify({'success': True, 'subjects': [subject_to_dict(s) for s in subjects]})


@bp.route('/subjects', methods=['POST'])
@login_required
@parent_required
def subjects_create():
    data = request_data()
    return respond(create_subject(current_context(), data.get('name'), data.get('color')))


@bp.route('/subjects/<int:subject_id>', methods=['PATCH'])
@login_required
@parent_required
def subject_update(subject_id):
    data = request_data()
    return respond(update_subject(current_context(), subject_id, data.get('name'), data.get('color')))


@bp.route('/subjects/<int:subject_id>', methods=['DELETE'])
@login_required
@parent_required
def subject_delete(subject_id):
    return respond(delete_subject(current_context(), subject_id))


@bp.route('/subjects/<int:subject_id>/weights', methods=['PUT'])
@login_required
@parent_required
def subject_weights(subject_id):
    data = request_data()
    weights = data.get('weights', data) if isinstance(data, dict) else data
    return respond(update_subject_weights(current_context(), subject_id, weights))


@bp.route('/templates')
@login_required
@parent_required
def templates_list():
    templates = list_templates(current_context())
    return jsonify({'success': True, 'templates': [template_to_dict(t) for t in templates]})


@bp.route('/templates', methods=['POST'])
@login_required
@parent_required
def templates_create():
    return respond(create_template(current_context(), request_data()))


@bp.route('/templates/<int:template_id>', methods=['PUT'])
@login_required
@parent_required
def template_update(template_id):
    return respond(update_template(current_context(), template_id, request_data()))


@bp.route('/templates/<int:template_id>', methods=['DELETE'])
@login_required
@parent_required
def template_delete(template_id):
    return respond(delete_template(current_context(), template_id))
