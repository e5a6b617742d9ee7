"""
Student profiles and their optional login accounts.
"""

from flask import current_app
from werkzeug.security import generate_password_hash

from constants import Role
from error_handler import service_action, ValidationError, NotFoundError
from extensions import db
from models import Student, User, Assignment, Goal, Notification, AttendanceLog
from .validation import require_title, clean_text

MIN_PASSWORD_LENGTH = 6


def _get_student(ctx, student_id):
    student = Student.query.filter_by(id=student_id, family_id=ctx.family_id).first()
    if not student:
        raise NotFoundError("Student not found")
    return student


def _clean_login(email, password):
    email = clean_text(email)
    password = password or None
    if bool(email) != bool(password):
        raise ValidationError("Email and password are both required to create a login")
    if not email:
        return None, None
    email = email.lower()
    if '@' not in email:
        raise ValidationError("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if User.query.filter_by(email=email).first():
        raise ValidationError("Email is already in use")
    return email, password


@service_action
def create_student(ctx, name, grade_level=None, email=None, password=None):
    """Create a student profile; with email and password also a STUDENT login."""
    ctx.require_parent("Only parents can add students")
    name = require_title(name, 'Name')
    grade_level = clean_text(grade_level)
    email, password = _clean_login(email, password)

    student = Student(name=name, grade_level=grade_level, family_id=ctx.family_id)
    if email:
        user = User(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.STUDENT.value,
            family_id=ctx.family_id
        )
        db.session.add(user)
        student.user = user
    db.session.add(student)
    db.session.commit()

    current_app.logger.info(f"Student {student.id} added to family {ctx.family_id} (login: {bool(email)})")
    return {'success': True, 'student_id': student.id, 'user_id': student.user_id}


@service_action
def update_student(ctx, student_id, name=None, grade_level=None):
    ctx.require_parent("Only parents can edit students")
    student = _get_student(ctx, student_id)
    if name is not None:
        student.name = require_title(name, 'Name')
        if student.user:
            student.user.name = student.name
    if grade_level is not None:
        student.grade_level = clean_text(grade_level)
    db.session.commit()
    return {'success': True}


@service_action
def delete_student(ctx, student_id):
    """Refuse while assignments exist; otherwise remove goals, attendance and login too."""
    ctx.require_parent("Only parents can remove students")
    student = _get_student(ctx, student_id)
    in_use = Assignment.query.filter_by(student_id=student.id, family_id=ctx.family_id).count()
    if in_use:
        raise ValidationError(f"Cannot delete student with {in_use} assignment(s)")

    Goal.query.filter_by(student_id=student.id, family_id=ctx.family_id).delete()
    AttendanceLog.query.filter_by(student_id=student.id, family_id=ctx.family_id).delete()
    user = student.user
    db.session.delete(student)
    if user:
        Notification.query.filter_by(user_id=user.id).delete()
        db.session.delete(user)
    db.session.commit()
    return {'success': True}


def list_students(ctx):
    query = Student.query.filter_by(family_id=ctx.family_id)
    if ctx.is_student:
        query = query.filter_by(user_id=ctx.user_id)
    return query.order_by(Student.name).all()


def student_to_dict(student):
    return {
        'id': student.id,
        'name': student.name,
        'grade_level': student.grade_level,
        'has_login': student.user_id is not None,
    }
