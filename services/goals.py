"""
Goal management for parents. Progress is computed by utils.goal_progress.
"""

from flask import current_app

from constants import MAX_GOAL_TARGET
from error_handler import service_action, ValidationError, NotFoundError
from extensions import db
from models import Goal, Student, Subject
from utils.goal_progress import recalculate_goal_progress
from .validation import require_title, parse_date, parse_int


def _clean_goal_values(ctx, values):
    title = require_title(values.get('title'))
    target_count = parse_int(values.get('target_count'), 'Target')
    if target_count < 1:
        raise ValidationError("Target must be at least 1")
    if target_count > MAX_GOAL_TARGET:
        raise ValidationError(f"Target must be at most {MAX_GOAL_TARGET}")

    term_start = parse_date(values.get('term_start'), 'Start date')
    term_end = parse_date(values.get('term_end'), 'End date')
    if term_start is None:
        raise ValidationError("Start date is required")
    if term_end is None:
        raise ValidationError("End date is required")
    if term_end < term_start:
        raise ValidationError("End date must be on or after the start date")

    subject_id = values.get('subject_id') or None
    if subject_id:
        subject = Subject.query.filter_by(id=subject_id, family_id=ctx.family_id).first()
        if not subject:
            raise NotFoundError("Subject not found")

    return {
        'title': title,
        'target_count': target_count,
        'term_start': term_start,
        'term_end': term_end,
        'subject_id': subject_id,
    }


def _get_goal(ctx, goal_id):
    goal = Goal.query.filter_by(id=goal_id, family_id=ctx.family_id).first()
    if not goal:
        raise NotFoundError("Goal not found")
    return goal


@service_action
def create_goal(ctx, values):
    ctx.require_parent("Only parents can create goals")
    cleaned = _clean_goal_values(ctx, values)

    student = Student.query.filter_by(id=values.get('student_id'), family_id=ctx.family_id).first()
    if not student:
        raise NotFoundError("Student not found")

    goal = Goal(student_id=student.id, family_id=ctx.family_id, **cleaned)
    db.session.add(goal)
    recalculate_goal_progress(goal)
    db.session.commit()

    current_app.logger.info(f"Goal {goal.id} created for student {student.id}: {goal.current_count}/{goal.target_count}")
    return {'success': True, 'goal_id': goal.id, 'current_count': goal.current_count}


@service_action
def update_goal(ctx, goal_id, values):
    ctx.require_parent("Only parents can manage goals")
    goal = _get_goal(ctx, goal_id)
    cleaned = _clean_goal_values(ctx, values)

    for field, value in cleaned.items():
        setattr(goal, field, value)
    recalculate_goal_progress(goal)
    db.session.commit()
    return {'success': True, 'current_count': goal.current_count}


@service_action
def delete_goal(ctx, goal_id):
    ctx.require_parent("Only parents can delete goals")
    goal = _get_goal(ctx, goal_id)
    db.session.delete(goal)
    db.session.commit()
    return {'success': True}


def list_goals(ctx, student_id=None):
    """Goals of the family; a student only sees their own."""
    query = Goal.query.filter_by(family_id=ctx.family_id)
    if ctx.is_student:
        own = Student.query.filter_by(user_id=ctx.user_id, family_id=ctx.family_id).first()
        if not own:
            return []
        query = query.filter_by(student_id=own.id)
    elif student_id:
        query = query.filter_by(student_id=student_id)
    return query.order_by(Goal.term_end, Goal.id).all()


def goal_to_dict(goal):
    return {
        'id': goal.id,
        'title': goal.title,
        'student_id': goal.student_id,
        'subject_id': goal.subject_id,
        'target_count': goal.target_count,
        'current_count': goal.current_count,
        'term_start': goal.term_start.isoformat(),
        'term_end': goal.term_end.isoformat(),
        'achieved': goal.current_count >= goal.target_count,
    }
