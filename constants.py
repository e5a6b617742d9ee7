"""
Fixed vocabularies shared by models, services and routes.
"""

from enum import Enum


class Role(str, Enum):
    PARENT = 'PARENT'
    STUDENT = 'STUDENT'
    SUPER_ADMIN = 'SUPER_ADMIN'


PARENT_ROLES = frozenset({Role.PARENT, Role.SUPER_ADMIN})


class AssignmentStatus(str, Enum):
    ASSIGNED = 'ASSIGNED'
    COMPLETED = 'COMPLETED'


# Values some older screens still reference. None of them is reachable
# through the transition table.
LEGACY_STATUSES = ('IN_PROGRESS', 'SUBMITTED', 'RETURNED')


class Priority(str, Enum):
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'


class Category(str, Enum):
    TEST = 'TEST'
    QUIZ = 'QUIZ'
    HOMEWORK = 'HOMEWORK'
    PROJECT = 'PROJECT'


class NotificationType(str, Enum):
    ASSIGNMENT_CREATED = 'ASSIGNMENT_CREATED'
    STATUS_CHANGED = 'STATUS_CHANGED'
    COMMENT_ADDED = 'COMMENT_ADDED'
    GRADE_POSTED = 'GRADE_POSTED'


SUBJECT_COLORS = [
    '#0D9488', '#2563EB', '#9333EA', '#16A34A',
    '#F59E0B', '#E11D48', '#0F766E', '#7C3AED',
    '#DC2626', '#0891B2', '#CA8A04', '#4F46E5',
    '#C026D3', '#059669', '#EA580C', '#6366F1',
]

# Stored numeric value for each letter a parent can pick.
LETTER_GRADE_VALUES = {
    'A+': 98.0,
    'A': 95.0,
    'A-': 91.0,
    'B+': 88.0,
    'B': 85.0,
    'B-': 81.0,
    'C+': 78.0,
    'C': 75.0,
    'C-': 71.0,
    'D+': 68.0,
    'D': 65.0,
    'F': 50.0,
}

# Lower bound of each letter band, highest first.
LETTER_GRADE_THRESHOLDS = [
    (98, 'A+'),
    (93, 'A'),
    (90, 'A-'),
    (87, 'B+'),
    (83, 'B'),
    (80, 'B-'),
    (77, 'C+'),
    (73, 'C'),
    (70, 'C-'),
    (67, 'D+'),
    (60, 'D'),
]

MAX_TITLE_LENGTH = 200
MAX_TEXT_LENGTH = 2000
MAX_ESTIMATED_MINUTES = 480
MAX_GOAL_TARGET = 999
MIN_ATTENDANCE_HOURS = 0.25
MAX_ATTENDANCE_HOURS = 12
MAX_ATTENDANCE_NOTES = 500
