"""
Notification creation helpers. Rows are added to the current session and
committed together with the write that triggered them.
"""

from constants import Role, NotificationType
from extensions import db
from models import Notification, User, Student


def notify(notification_type, message, recipient_user_id, family_id, assignment_id=None, actor_name='Unknown'):
    """Create a notification for one user."""
    notification = Notification()
    notification.user_id = recipient_user_id
    notification.family_id = family_id
    notification.type = NotificationType(notification_type).value
    notification.message = message
    notification.assignment_id = assignment_id
    notification.actor_name = actor_name
    db.session.add(notification)
    return notification


def notify_many(entries):
    """
    Create one notification per entry in a single batch.

    Args:
        entries: iterable of dicts with the keyword arguments of notify().
    """
    notifications = [notify(**entry) for entry in entries]
    if notifications:
        db.session.flush()
    return notifications


def parent_user_ids(family_id):
    """Users with the PARENT role in a family."""
    parents = User.query.filter_by(family_id=family_id, role=Role.PARENT.value).all()
    return [p.id for p in parents]


def student_user_id(student_id, family_id):
    """Linked user of a student profile, or None."""
    student = Student.query.filter_by(id=student_id, family_id=family_id).first()
    return student.user_id if student else None


def notify_parents(family_id, notification_type, message, assignment_id=None, actor_name='Student'):
    return notify_many(
        {
            'notification_type': notification_type,
            'message': message,
            'recipient_user_id': user_id,
            'family_id': family_id,
            'assignment_id': assignment_id,
            'actor_name': actor_name,
        }
        for user_id in parent_user_ids(family_id)
    )


def notify_student(student_id, family_id, notification_type, message, assignment_id=None, actor_name='Parent'):
    """Notify the student's linked user. Returns None when there is none."""
    user_id = student_user_id(student_id, family_id)
    if not user_id:
        return None
    return notify(notification_type, message, user_id, family_id, assignment_id, actor_name)


def get_notifications(ctx, unread_only=False, limit=50):
    query = Notification.query.filter_by(user_id=ctx.user_id, family_id=ctx.family_id)
    if unread_only:
        query = query.filter_by(is_read=False)
    return query.order_by(Notification.timestamp.desc(), Notification.id.desc()).limit(limit).all()


def unread_count(ctx):
    return Notification.query.filter_by(
        user_id=ctx.user_id,
        family_id=ctx.family_id,
        is_read=False
    ).count()


def mark_as_read(ctx, notification_id):
    """Mark one of the caller's notifications read. Others are left untouched."""
    Notification.query.filter_by(
        id=notification_id,
        user_id=ctx.user_id,
        family_id=ctx.family_id
    ).update({'is_read': True})
    db.session.commit()
    return {'success': True}


def mark_all_as_read(ctx):
    updated = Notification.query.filter_by(
        user_id=ctx.user_id,
        family_id=ctx.family_id,
        is_read=False
    ).update({'is_read': True})
    db.session.commit()
    return {'success': True, 'count': updated}
