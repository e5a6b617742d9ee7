"""
Goal routes.
"""

from flask import Blueprint, request, jsonify
from flask_login import login_required

from decorators import parent_required
from services.goals import create_goal, update_goal, delete_goal, list_goals, goal_to_dict
from .utils import current_context, request_data, respond

bp = Blueprint('goals', __name__)


@bp.route('/goals')
@login_required
def goals_list():
    goals = list_goals(current_context(), student_id=request.args.get('student_id', type=int))
    return jsonify({'success': True, 'goals': [goal_to_dict(g) for g in goals]})


@bp.route('/goals', methods=['POST'])
@login_required
@parent_required
def goals_create():
    return respond(create_goal(current_context(), request_data()))


@bp.route('/goals/<int:goal_id>', methods=['PUT'])
@login_required
@parent_required
def goal_update(goal_id):
    return respond(update_goal(current_context(), goal_id, request_data()))


@bp.route('/goals/<int:goal_id>', methods=['DELETE'])
@login_required
@parent_required
def goal_delete(goal_id):
    return respond(delete_goal(current_context(), goal_id))
