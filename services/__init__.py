"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .context import RequestContext
from .assignment_status import VALID_TRANSITIONS, can_transition, check_transition
from .grade_calculation import (
    compute_subject_gpa,
    compute_overall_gpa,
    gpa_to_letter_label,
    letter_to_numeric,
)
from .notifications import (
    notify,
    notify_many,
    get_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
)
from .activity_log import log_activity, get_activity_log
from .assignments import (
    create_assignment,
    update_assignment,
    update_assignment_status,
    grade_assignment,
    add_comment,
    delete_assignment,
    list_assignments,
)
from .goals import create_goal, update_goal, delete_goal, list_goals
from .subjects import (
    create_subject,
    update_subject,
    delete_subject,
    update_subject_weights,
    create_template,
    update_template,
    delete_template,
)
from .students import create_student, update_student, delete_student
from .csv_import import import_assignments_csv
from .attendance import (
    create_attendance_log,
    update_attendance_log,
    delete_attendance_log,
    list_attendance_logs,
)
from .reports import (
    build_progress_report,
    progress_report_csv,
    build_attendance_report,
    attendance_report_csv,
)

__all__ = [
    'RequestContext',
    'VALID_TRANSITIONS',
    'can_transition',
    'check_transition',
    'compute_subject_gpa',
    'compute_overall_gpa',
    'gpa_to_letter_label',
    'letter_to_numeric',
    'notify',
    'notify_many',
    'get_notifications',
    'unread_count',
    'mark_as_read',
    'mark_all_as_read',
    'log_activity',
    'get_activity_log',
    'create_assignment',
    'update_assignment',
    'update_assignment_status',
    'grade_assignment',
    'add_comment',
    'delete_assignment',
    'list_assignments',
    'create_goal',
    'update_goal',
    'delete_goal',
    'list_goals',
    'create_subject',
    'update_subject',
    'delete_subject',
    'update_subject_weights',
    'create_template',
    'update_template',
    'delete_template',
    'create_student',
    'update_student',
    'delete_student',
    'import_assignments_csv',
    'build_progress_report',
    'progress_report_csv',
    'create_attendance_log',
    'update_attendance_log',
    'delete_attendance_log',
    'list_attendance_logs',
    'build_attendance_report',
    'attendance_report_csv',
]
