"""
Assignment lifecycle: creation, status transitions, grading, comments.

Each public operation is one unit of work. Validation runs before any row is
touched, side effects (activity log, goal recalculation, notifications) are
added to the same session, and a single commit at the end makes the whole
request visible at once.
"""

import math

from flask import current_app

from constants import AssignmentStatus, NotificationType, Role, MAX_TEXT_LENGTH
from error_handler import (
    service_action, ValidationError, AuthorizationError, NotFoundError
)
from extensions import db
from models import Assignment, AssignmentTemplate, Comment, Student, Subject, utcnow
from utils.goal_progress import recalculate_goals_for_assignment
from .activity_log import log_activity
from .assignment_status import check_transition
from .grade_calculation import letter_to_numeric
from .notifications import notify_many, notify_parents, notify_student, student_user_id
from .validation import (
    clean_text, require_title, optional_long_text, parse_date, parse_priority,
    parse_category, parse_estimated_minutes
)


def get_assignment(ctx, assignment_id):
    assignment = Assignment.query.filter_by(id=assignment_id, family_id=ctx.family_id).first()
    if not assignment:
        raise NotFoundError("Assignment not found")
    return assignment


def own_student_profile(ctx):
    """Student profile linked to the acting user, or None."""
    return Student.query.filter_by(user_id=ctx.user_id, family_id=ctx.family_id).first()


def _require_subject(ctx, subject_id):
    if not subject_id:
        return None
    subject = Subject.query.filter_by(id=subject_id, family_id=ctx.family_id).first()
    if not subject:
        raise ValidationError("Invalid subject")
    return subject


def _append_comment(ctx, assignment, content):
    comment = Comment(
        content=content,
        author_id=ctx.user_id,
        author_name=ctx.user_name,
        author_role=ctx.role.value,
        assignment_id=assignment.id
    )
    db.session.add(comment)
    return comment


def _clean_grade(grade_label, grade_value):
    """Validate a (label, value) pair. A label alone derives its value."""
    label = clean_text(grade_label)
    if label is not None:
        label = label.upper()
        derived = letter_to_numeric(label)
        if grade_value is None:
            grade_value = derived
    if grade_value is not None:
        try:
            grade_value = float(grade_value)
        except (TypeError, ValueError):
            raise ValidationError("Grade must be a number")
        if not math.isfinite(grade_value):
            raise ValidationError("Grade must be a number")
        if grade_value < 0 or grade_value > 100:
            raise ValidationError("Grade must be between 0 and 100")
    return label, grade_value


def create_assignment_rows(ctx, rows):
    """
    Insert assignments plus their CREATED log entries and student
    notifications. Rows must already be validated and resolved to ids.
    Does not commit.
    """
    assignments = []
    for row in rows:
        assignment = Assignment(
            title=row['title'],
            description=row.get('description'),
            status=AssignmentStatus.ASSIGNED.value,
            priority=row.get('priority') or 'MEDIUM',
            category=row.get('category'),
            due_date=row.get('due_date'),
            estimated_minutes=row.get('estimated_minutes'),
            student_id=row['student_id'],
            subject_id=row.get('subject_id'),
            template_id=row.get('template_id'),
            family_id=ctx.family_id
        )
        db.session.add(assignment)
        assignments.append(assignment)
    db.session.flush()

    for assignment in assignments:
        log_activity(ctx, 'CREATED', f'Assignment "{assignment.title}" created', assignment.id)

    user_ids = {}
    for assignment in assignments:
        if assignment.student_id not in user_ids:
            user_ids[assignment.student_id] = student_user_id(assignment.student_id, ctx.family_id)
    notify_many(
        {
            'notification_type': NotificationType.ASSIGNMENT_CREATED,
            'message': f'New assignment: "{assignment.title}"',
            'recipient_user_id': user_ids[assignment.student_id],
            'family_id': ctx.family_id,
            'assignment_id': assignment.id,
            'actor_name': ctx.user_name,
        }
        for assignment in assignments
        if user_ids[assignment.student_id]
    )
    return assignments


@service_action
def create_assignment(ctx, values):
    """Create one assignment per selected student, all or nothing."""
    ctx.require_parent("Only parents can create assignments")

    template = None
    template_id = values.get('template_id') or None
    if template_id:
        template = AssignmentTemplate.query.filter_by(id=template_id, family_id=ctx.family_id).first()
        if not template:
            raise ValidationError("Invalid template")

    title = values.get('title') or (template.title if template else None)
    description = values.get('description') or (template.description if template else None)
    subject_id = values.get('subject_id') or (template.subject_id if template else None)
    minutes = values.get('estimated_minutes') or (template.estimated_minutes if template else None)

    fields = {
        'title': require_title(title),
        'description': optional_long_text(description),
        'priority': parse_priority(values.get('priority')),
        'category': parse_category(values.get('category')),
        'due_date': parse_date(values.get('due_date'), 'Due date'),
        'estimated_minutes': parse_estimated_minutes(minutes),
        'template_id': template.id if template else None,
    }

    raw_ids = values.get('student_ids') or []
    if not isinstance(raw_ids, (list, tuple)):
        raise ValidationError("student_ids must be a list")
    try:
        student_ids = list(dict.fromkeys(int(sid) for sid in raw_ids))
    except (TypeError, ValueError):
        raise ValidationError("Invalid student selection")
    if not student_ids:
        raise ValidationError("Select at least one student")
    found = Student.query.filter(
        Student.id.in_(student_ids),
        Student.family_id == ctx.family_id
    ).count()
    if found != len(student_ids):
        raise ValidationError("Invalid student selection")

    subject = _require_subject(ctx, subject_id)
    fields['subject_id'] = subject.id if subject else None

    assignments = create_assignment_rows(ctx, [dict(fields, student_id=sid) for sid in student_ids])
    db.session.commit()

    current_app.logger.info(f"Created {len(assignments)} assignment(s) '{fields['title']}' in family {ctx.family_id}")
    return {'success': True, 'count': len(assignments), 'assignment_ids': [a.id for a in assignments]}


@service_action
def update_assignment_status(ctx, assignment_id, new_status, comment=None, grade_label=None, grade_value=None):
    """
    Move an assignment along the transition table.

    Students complete their own work (optionally with a grade pair); parents
    return completed work for revision, which requires feedback.
    """
    try:
        requested = AssignmentStatus(new_status)
    except ValueError:
        raise ValidationError(f"Invalid status: {new_status}")

    comment = clean_text(comment)
    if comment and len(comment) > MAX_TEXT_LENGTH:
        raise ValidationError(f"Comment must be at most {MAX_TEXT_LENGTH} characters")
    if requested == AssignmentStatus.ASSIGNED and not comment:
        raise ValidationError("Feedback is required when returning an assignment")
    grade_label, grade_value = _clean_grade(grade_label, grade_value)

    assignment = get_assignment(ctx, assignment_id)

    if ctx.role == Role.STUDENT:
        profile = own_student_profile(ctx)
        if not profile or profile.id != assignment.student_id:
            raise AuthorizationError("This is not your assignment")

    old_status = assignment.status
    check_transition(old_status, requested, ctx.role)

    assignment.status = requested.value
    if requested == AssignmentStatus.COMPLETED:
        assignment.completed_date = utcnow()
        if grade_value is not None:
            assignment.grade_value = grade_value
            assignment.grade_label = grade_label
    else:
        assignment.completed_date = None

    if comment:
        _append_comment(ctx, assignment, comment)

    log_activity(ctx, 'STATUS_CHANGED', f'{old_status} → {requested.value}', assignment.id)

    recalculate_goals_for_assignment(assignment.student_id, ctx.family_id, assignment.subject_id)

    if requested == AssignmentStatus.COMPLETED:
        notify_parents(
            ctx.family_id, NotificationType.STATUS_CHANGED,
            f'{ctx.user_name} completed "{assignment.title}"',
            assignment_id=assignment.id, actor_name=ctx.user_name
        )
    else:
        notify_student(
            assignment.student_id, ctx.family_id, NotificationType.STATUS_CHANGED,
            f'{ctx.user_name} returned "{assignment.title}"',
            assignment_id=assignment.id, actor_name=ctx.user_name
        )

    db.session.commit()
    current_app.logger.info(
        f"Assignment {assignment.id}: {old_status} -> {requested.value} by user {ctx.user_id}"
    )
    return {'success': True, 'status': assignment.status}


@service_action
def grade_assignment(ctx, assignment_id, grade_label):
    """Set or clear the letter grade of a completed assignment."""
    ctx.require_parent("Only parents can grade assignments")
    assignment = get_assignment(ctx, assignment_id)
    if assignment.status != AssignmentStatus.COMPLETED.value:
        raise ValidationError("Only completed assignments can be graded")

    label = clean_text(grade_label)
    if label:
        label = label.upper()
        assignment.grade_value = letter_to_numeric(label)
        assignment.grade_label = label
        log_activity(ctx, 'GRADED', f'Graded {label}', assignment.id)
        notify_student(
            assignment.student_id, ctx.family_id, NotificationType.GRADE_POSTED,
            f'{ctx.user_name} graded "{assignment.title}": {label}',
            assignment_id=assignment.id, actor_name=ctx.user_name
        )
    else:
        assignment.grade_value = None
        assignment.grade_label = None
        log_activity(ctx, 'GRADED', 'Grade cleared', assignment.id)

    db.session.commit()
    return {'success': True, 'grade_label': assignment.grade_label, 'grade_value': assignment.grade_value}


@service_action
def update_assignment(ctx, assignment_id, values):
    """Edit assignment details. Status and grade change elsewhere."""
    ctx.require_parent("Only parents can edit assignments")
    assignment = get_assignment(ctx, assignment_id)
    old_subject_id = assignment.subject_id

    if 'title' in values:
        assignment.title = require_title(values['title'])
    if 'description' in values:
        assignment.description = optional_long_text(values['description'])
    if 'priority' in values:
        assignment.priority = parse_priority(values['priority'])
    if 'category' in values:
        assignment.category = parse_category(values['category'])
    if 'due_date' in values:
        assignment.due_date = parse_date(values['due_date'], 'Due date')
    if 'estimated_minutes' in values:
        assignment.estimated_minutes = parse_estimated_minutes(values['estimated_minutes'])
    if 'subject_id' in values:
        subject = _require_subject(ctx, values['subject_id'])
        assignment.subject_id = subject.id if subject else None

    log_activity(ctx, 'UPDATED', f'Assignment "{assignment.title}" updated', assignment.id)

    if assignment.status == AssignmentStatus.COMPLETED.value and assignment.subject_id != old_subject_id:
        recalculate_goals_for_assignment(assignment.student_id, ctx.family_id, old_subject_id)
        recalculate_goals_for_assignment(assignment.student_id, ctx.family_id, assignment.subject_id)

    db.session.commit()
    return {'success': True}


@service_action
def add_comment(ctx, assignment_id, content):
    content = clean_text(content)
    if not content:
        raise ValidationError("Comment cannot be empty")
    if len(content) > MAX_TEXT_LENGTH:
        raise ValidationError(f"Comment must be at most {MAX_TEXT_LENGTH} characters")

    assignment = get_assignment(ctx, assignment_id)
    if ctx.is_student:
        profile = own_student_profile(ctx)
        if not profile or profile.id != assignment.student_id:
            raise AuthorizationError("This is not your assignment")

    comment = _append_comment(ctx, assignment, content)
    log_activity(ctx, 'COMMENT_ADDED', 'Comment added', assignment.id)

    message = f'{ctx.user_name} commented on "{assignment.title}"'
    if ctx.is_parent:
        notify_student(
            assignment.student_id, ctx.family_id, NotificationType.COMMENT_ADDED, message,
            assignment_id=assignment.id, actor_name=ctx.user_name
        )
    else:
        notify_parents(
            ctx.family_id, NotificationType.COMMENT_ADDED, message,
            assignment_id=assignment.id, actor_name=ctx.user_name
        )

    db.session.commit()
    return {'success': True, 'comment_id': comment.id}


@service_action
def delete_assignment(ctx, assignment_id):
    ctx.require_parent("Only parents can delete assignments")
    assignment = get_assignment(ctx, assignment_id)
    was_completed = assignment.status == AssignmentStatus.COMPLETED.value
    student_id, subject_id = assignment.student_id, assignment.subject_id

    # Entries tied to the assignment go with it, so this one is left unlinked.
    log_activity(ctx, 'DELETED', f'Assignment "{assignment.title}" deleted')
    db.session.delete(assignment)
    if was_completed:
        recalculate_goals_for_assignment(student_id, ctx.family_id, subject_id)
    db.session.commit()
    return {'success': True}


def list_assignments(ctx, student_id=None, status=None, subject_id=None):
    """Family assignments, newest first. Students only see their own."""
    query = Assignment.query.filter_by(family_id=ctx.family_id)
    if ctx.is_student:
        profile = own_student_profile(ctx)
        if not profile:
            return []
        query = query.filter_by(student_id=profile.id)
    elif student_id:
        query = query.filter_by(student_id=student_id)
    if status:
        query = query.filter_by(status=status)
    if subject_id:
        query = query.filter_by(subject_id=subject_id)
    return query.order_by(Assignment.assigned_date.desc(), Assignment.id.desc()).all()


def assignment_to_dict(assignment):
    return {
        'id': assignment.id,
        'title': assignment.title,
        'description': assignment.description,
        'status': assignment.status,
        'priority': assignment.priority,
        'category': assignment.category,
        'due_date': assignment.due_date.isoformat() if assignment.due_date else None,
        'assigned_date': assignment.assigned_date.isoformat() if assignment.assigned_date else None,
        'completed_date': assignment.completed_date.isoformat() if assignment.completed_date else None,
        'estimated_minutes': assignment.estimated_minutes,
        'grade_value': assignment.grade_value,
        'grade_label': assignment.grade_label,
        'student_id': assignment.student_id,
        'subject_id': assignment.subject_id,
    }
