from datetime import datetime, timezone

from flask_login import UserMixin
from extensions import db
from constants import AssignmentStatus, Priority


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Family(db.Model):
    """
    Tenant boundary: one household's parents, students and data.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"Family('{self.name}')"


class User(db.Model, UserMixin):
    """
    Login-capable account. Parents, students and super admins all live here;
    a student account is tied to its Student profile through Student.user_id.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False)  # PARENT, STUDENT or SUPER_ADMIN
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    family = db.relationship('Family', backref='users', lazy=True)

    def __repr__(self):
        return f"User('{self.email}', '{self.role}')"


class Student(db.Model):
    """
    Learner profile, optionally linked to a user account.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    grade_level = db.Column(db.String(20), nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship('User', backref=db.backref('student_profile', uselist=False), lazy=True)

    def __repr__(self):
        return f"Student('{self.name}', Family: {self.family_id})"


class Subject(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(7), nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    weights = db.relationship('SubjectWeight', backref='subject', lazy=True,
                              cascade='all, delete-orphan')

    def weight_map(self):
        """Category -> percentage for the configured weights."""
        return {w.category: w.weight for w in self.weights}

    def __repr__(self):
        return f"Subject('{self.name}')"


class SubjectWeight(db.Model):
    """
    Share of a subject's GPA carried by one assignment category.
    """
    id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    category = db.Column(db.String(20), nullable=False)
    weight = db.Column(db.Float, nullable=False)

    __table_args__ = (db.UniqueConstraint('subject_id', 'category', name='uq_subject_weight_category'),)

    def __repr__(self):
        return f"SubjectWeight(Subject: {self.subject_id}, {self.category}: {self.weight})"


class AssignmentTemplate(db.Model):
    """
    Model for saving common assignment structures.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=True)
    estimated_minutes = db.Column(db.Integer, nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    subject = db.relationship('Subject', backref='templates', lazy=True)


class Assignment(db.Model):
    """
    A unit of schoolwork for exactly one student.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # ASSIGNED or COMPLETED, see services.assignment_status
    status = db.Column(db.String(20), default=AssignmentStatus.ASSIGNED.value, nullable=False)
    priority = db.Column(db.String(10), default=Priority.MEDIUM.value, nullable=False)
    category = db.Column(db.String(20), nullable=True)

    due_date = db.Column(db.Date, nullable=True)
    assigned_date = db.Column(db.DateTime, default=utcnow, nullable=False)
    completed_date = db.Column(db.DateTime, nullable=True)
    estimated_minutes = db.Column(db.Integer, nullable=True)

    grade_value = db.Column(db.Float, nullable=True)
    grade_label = db.Column(db.String(5), nullable=True)

    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    template_id = db.Column(db.Integer, db.ForeignKey('assignment_template.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    student = db.relationship('Student', backref='assignments', lazy=True)
    subject = db.relationship('Subject', backref='assignments', lazy=True)
    template = db.relationship('AssignmentTemplate', backref='assignments', lazy=True)
    comments = db.relationship('Comment', backref='assignment', lazy=True,
                               cascade='all, delete-orphan', order_by='Comment.created_at')
    activity_logs = db.relationship('ActivityLog', backref='assignment', lazy=True,
                                    cascade='all, delete-orphan')
    # Notifications outlive the assignment; their link is nulled on delete.
    notifications = db.relationship('Notification', backref='assignment', lazy=True)

    def __repr__(self):
        return f"Assignment('{self.title}', Student: {self.student_id}, {self.status})"


class Goal(db.Model):
    """
    Target count of completed assignments inside a term window.
    current_count is recomputed from assignments, never edited in place.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    target_count = db.Column(db.Integer, nullable=False)
    current_count = db.Column(db.Integer, default=0, nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    term_start = db.Column(db.Date, nullable=False)
    term_end = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    student = db.relationship('Student', backref='goals', lazy=True)
    subject = db.relationship('Subject', backref='goals', lazy=True)

    def __repr__(self):
        return f"Goal('{self.title}', {self.current_count}/{self.target_count})"


class Comment(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    author_name = db.Column(db.String(100), nullable=False)
    author_role = db.Column(db.String(20), nullable=False)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"Comment(Assignment: {self.assignment_id}, Author: {self.author_name})"


class ActivityLog(db.Model):
    """
    Model for tracking user activities for auditing purposes.
    """
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    user_name = db.Column(db.String(100), nullable=False)
    action = db.Column(db.String(50), nullable=False)
    details = db.Column(db.Text, nullable=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship('User', backref='activity_logs', lazy=True)

    def __repr__(self):
        return f"ActivityLog(User: {self.user_id}, Action: {self.action})"


class Notification(db.Model):
    """
    Model for storing per-user notifications.
    """
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    type = db.Column(db.String(32), nullable=False)  # see constants.NotificationType
    message = db.Column(db.Text, nullable=False)
    actor_name = db.Column(db.String(100), nullable=False)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=True)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)

    user = db.relationship('User', backref='notifications', lazy=True)

    def __repr__(self):
        return f"Notification(User: {self.user_id}, Type: {self.type})"


class AttendanceLog(db.Model):
    """
    Hours of schooling logged for one student on one day.
    """
    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False)
    hours_logged = db.Column(db.Float, nullable=False)
    notes = db.Column(db.String(500), nullable=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey('family.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    student = db.relationship('Student', backref='attendance_logs', lazy=True)
    subject = db.relationship('Subject', backref='attendance_logs', lazy=True)

    def __repr__(self):
        return f"AttendanceLog(Student: {self.student_id}, {self.date}: {self.hours_logged}h)"
