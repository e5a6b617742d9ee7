from datetime import datetime
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from config import TestingConfig
from constants import Role, AssignmentStatus
from extensions import db
from models import Family, User, Student, Subject, Assignment
from services.context import RequestContext

PASSWORD = 'secret123'


def seed_family(name='Rivera'):
    """One family: a parent, a student with a login (Leo), one without (Ava), two subjects."""
    family = Family(name=f'{name} Family')
    db.session.add(family)
    db.session.flush()

    parent = User(
        name=f'Maria {name}',
        email=f'{name.lower()}.parent@example.com',
        password_hash=generate_password_hash(PASSWORD),
        role=Role.PARENT.value,
        family_id=family.id
    )
    student_user = User(
        name=f'Leo {name}',
        email=f'{name.lower()}.leo@example.com',
        password_hash=generate_password_hash(PASSWORD),
        role=Role.STUDENT.value,
        family_id=family.id
    )
    db.session.add_all([parent, student_user])
    db.session.flush()

    leo = Student(name='Leo', grade_level='5', family_id=family.id, user_id=student_user.id)
    ava = Student(name='Ava', grade_level='3', family_id=family.id)
    math = Subject(name='Math', color='#2563EB', family_id=family.id)
    science = Subject(name='Science', color='#16A34A', family_id=family.id)
    db.session.add_all([leo, ava, math, science])
    db.session.commit()

    return SimpleNamespace(
        family=family,
        parent=parent,
        student_user=student_user,
        leo=leo,
        ava=ava,
        math=math,
        science=science,
        parent_ctx=RequestContext.from_user(parent),
        student_ctx=RequestContext.from_user(student_user),
    )


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def family(app_context):
    return seed_family('Rivera')


@pytest.fixture
def other_family(app_context):
    return seed_family('Chen')


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_assignment(family):
    """Insert an assignment row directly, bypassing the workflow."""
    def _make(student=None, subject=None, status=AssignmentStatus.ASSIGNED.value,
              completed_date=None, title='Worksheet', **fields):
        student = student or family.leo
        if status == AssignmentStatus.COMPLETED.value and completed_date is None:
            completed_date = datetime(2025, 9, 15, 10, 0)
        assignment = Assignment(
            title=title,
            status=status,
            completed_date=completed_date,
            student_id=student.id,
            subject_id=subject.id if subject else None,
            family_id=student.family_id,
            **fields
        )
        db.session.add(assignment)
        db.session.commit()
        return assignment
    return _make
