"""
Goal progress recalculation.

Goal.current_count is a cached count of completed assignments; it is always
rederived from the assignment rows here, never incremented, so running it
any number of times in any order lands on the same value.
"""

from datetime import datetime, time, timedelta

from flask import current_app
from sqlalchemy import or_

from constants import AssignmentStatus
from extensions import db
from models import Goal, Assignment


def term_window(goal):
    """[start, end) datetimes covering term_start through the whole term_end day."""
    start = datetime.combine(goal.term_start, time.min)
    end = datetime.combine(goal.term_end + timedelta(days=1), time.min)
    return start, end


def count_completed_for_goal(goal):
    """Completed assignments of the goal's student inside the goal's window."""
    start, end = term_window(goal)
    query = Assignment.query.filter(
        Assignment.student_id == goal.student_id,
        Assignment.family_id == goal.family_id,
        Assignment.status == AssignmentStatus.COMPLETED.value,
        Assignment.completed_date >= start,
        Assignment.completed_date < end
    )
    if goal.subject_id:
        query = query.filter(Assignment.subject_id == goal.subject_id)
    return query.count()


def recalculate_goal_progress(goal):
    """
    Recompute current_count for one goal, clamped to target_count.

    Args:
        goal: Goal object

    Returns:
        int: the new current_count
    """
    db.session.flush()
    count = count_completed_for_goal(goal)
    goal.current_count = min(count, goal.target_count)
    return goal.current_count


def recalculate_goals_for_assignment(student_id, family_id, subject_id):
    """
    Recompute every goal an assignment of this student/subject can affect:
    goals on the same subject plus goals with no subject. With no subject,
    all of the student's goals are recomputed.

    Returns:
        list of the Goal objects that were recomputed
    """
    query = Goal.query.filter_by(student_id=student_id, family_id=family_id)
    if subject_id:
        query = query.filter(or_(Goal.subject_id == subject_id, Goal.subject_id.is_(None)))
    goals = query.all()

    for goal in goals:
        recalculate_goal_progress(goal)

    if goals:
        current_app.logger.info(
            f"Recalculated {len(goals)} goal(s) for student {student_id} (subject {subject_id})"
        )
    return goals
