"""
Attendance logging: hours of school per student and day. Parents only.
"""

import math

from flask import current_app

from constants import MIN_ATTENDANCE_HOURS, MAX_ATTENDANCE_HOURS, MAX_ATTENDANCE_NOTES
from error_handler import service_action, ValidationError, NotFoundError
from extensions import db
from models import AttendanceLog, Student, Subject
from .validation import clean_text, parse_date, parse_int


def _parse_hours(value):
    if value is None or value == '':
        raise ValidationError("Hours are required")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Hours must be a number")
    if not math.isfinite(hours):
        raise ValidationError("Hours must be a number")
    if hours < MIN_ATTENDANCE_HOURS:
        raise ValidationError(f"Minimum {MIN_ATTENDANCE_HOURS:g} hours")
    if hours > MAX_ATTENDANCE_HOURS:
        raise ValidationError(f"Maximum {MAX_ATTENDANCE_HOURS:g} hours")
    return hours


def _clean_log_values(ctx, values):
    log_date = parse_date(values.get('date'))
    if log_date is None:
        raise ValidationError("Date is required")
    hours = _parse_hours(values.get('hours_logged'))

    notes = clean_text(values.get('notes'))
    if notes and len(notes) > MAX_ATTENDANCE_NOTES:
        raise ValidationError(f"Notes must be at most {MAX_ATTENDANCE_NOTES} characters")

    student_id = values.get('student_id') or None
    if not student_id:
        raise ValidationError("Student is required")
    student = Student.query.filter_by(id=parse_int(student_id, 'Student'), family_id=ctx.family_id).first()
    if not student:
        raise NotFoundError("Student not found")

    subject_id = values.get('subject_id') or None
    if subject_id:
        subject = Subject.query.filter_by(id=parse_int(subject_id, 'Subject'), family_id=ctx.family_id).first()
        if not subject:
            raise NotFoundError("Subject not found")
        subject_id = subject.id

    return {
        'date': log_date,
        'hours_logged': hours,
        'notes': notes,
        'student_id': student.id,
        'subject_id': subject_id,
    }


def _get_log(ctx, log_id):
    log = AttendanceLog.query.filter_by(id=log_id, family_id=ctx.family_id).first()
    if not log:
        raise NotFoundError("Log not found")
    return log


@service_action
def create_attendance_log(ctx, values):
    ctx.require_parent("Only parents can log attendance")
    log = AttendanceLog(family_id=ctx.family_id, **_clean_log_values(ctx, values))
    db.session.add(log)
    db.session.commit()

    current_app.logger.info(f"Logged {log.hours_logged:g}h for student {log.student_id} on {log.date}")
    return {'success': True, 'log_id': log.id}


@service_action
def update_attendance_log(ctx, log_id, values):
    """Replace every field of a log; the same rules as creating one apply."""
    ctx.require_parent("Only parents can edit attendance logs")
    log = _get_log(ctx, log_id)
    for field, value in _clean_log_values(ctx, values).items():
        setattr(log, field, value)
    db.session.commit()
    return {'success': True}


@service_action
def delete_attendance_log(ctx, log_id):
    ctx.require_parent("Only parents can delete attendance logs")
    log = _get_log(ctx, log_id)
    db.session.delete(log)
    db.session.commit()
    return {'success': True}


def list_attendance_logs(ctx, student_id=None, date_from=None, date_to=None):
    """Newest first. Both date bounds are inclusive."""
    ctx.require_parent("Only parents can view attendance")
    date_from = parse_date(date_from, 'Start date')
    date_to = parse_date(date_to, 'End date')

    query = AttendanceLog.query.filter_by(family_id=ctx.family_id)
    if student_id:
        query = query.filter_by(student_id=student_id)
    if date_from:
        query = query.filter(AttendanceLog.date >= date_from)
    if date_to:
        query = query.filter(AttendanceLog.date <= date_to)
    return query.order_by(AttendanceLog.date.desc(), AttendanceLog.id.desc()).all()


def attendance_to_dict(log):
    return {
        'id': log.id,
        'date': log.date.isoformat(),
        'hours_logged': log.hours_logged,
        'notes': log.notes,
        'student_id': log.student_id,
        'student': log.student.name if log.student else None,
        'subject_id': log.subject_id,
        'subject': log.subject.name if log.subject else None,
    }
