"""
Activity logging for auditing. One entry per assignment event.
"""

from extensions import db
from models import ActivityLog


def log_activity(ctx, action, details=None, assignment_id=None):
    """Append one activity entry to the current session."""
    log_entry = ActivityLog()
    log_entry.user_id = ctx.user_id
    log_entry.user_name = ctx.user_name
    log_entry.action = action
    log_entry.details = details
    log_entry.assignment_id = assignment_id
    log_entry.family_id = ctx.family_id
    db.session.add(log_entry)
    return log_entry


def get_activity_log(family_id, assignment_id=None, action=None, start_date=None, end_date=None, limit=100):
    """Retrieve activity log entries with optional filters."""
    query = ActivityLog.query.filter_by(family_id=family_id)
    if assignment_id:
        query = query.filter_by(assignment_id=assignment_id)
    if action:
        query = query.filter_by(action=action)
    if start_date:
        query = query.filter(ActivityLog.timestamp >= start_date)
    if end_date:
        query = query.filter(ActivityLog.timestamp <= end_date)
    return query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit).all()
