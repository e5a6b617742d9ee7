from datetime import date

import pytest

from constants import AssignmentStatus, NotificationType
from extensions import db
from models import ActivityLog, Assignment, AssignmentTemplate, Comment, Goal, Notification
from services.assignments import (
    create_assignment, update_assignment, update_assignment_status, grade_assignment,
    add_comment, delete_assignment, list_assignments
)

ASSIGNED = AssignmentStatus.ASSIGNED.value
COMPLETED = AssignmentStatus.COMPLETED.value


def notifications_for(user, notification_type=None):
    query = Notification.query.filter_by(user_id=user.id)
    if notification_type:
        query = query.filter_by(type=notification_type.value)
    return query.all()


def test_create_for_several_students(family):
    result = create_assignment(family.parent_ctx, {
        'title': 'Long division',
        'student_ids': [family.leo.id, family.ava.id],
        'subject_id': family.math.id,
        'category': 'homework',
        'due_date': '2025-09-20',
        'estimated_minutes': '45',
    })

    assert result['success'] is True
    assert result['count'] == 2
    assignments = Assignment.query.order_by(Assignment.id).all()
    assert [a.student_id for a in assignments] == [family.leo.id, family.ava.id]
    assert all(a.status == ASSIGNED and a.priority == 'MEDIUM' for a in assignments)
    assert assignments[0].category == 'HOMEWORK'
    assert assignments[0].due_date == date(2025, 9, 20)
    assert ActivityLog.query.filter_by(action='CREATED').count() == 2
    # Ava has no login, so only Leo hears about it
    created = notifications_for(family.student_user, NotificationType.ASSIGNMENT_CREATED)
    assert len(created) == 1
    assert Notification.query.count() == 1


def test_create_from_template(family):
    template = AssignmentTemplate(
        title='Spelling list', description='Words 1-20', subject_id=family.science.id,
        estimated_minutes=20, family_id=family.family.id
    )
    db.session.add(template)
    db.session.commit()

    result = create_assignment(family.parent_ctx, {'template_id': template.id, 'student_ids': [family.leo.id]})

    assignment = db.session.get(Assignment, result['assignment_ids'][0])
    assert assignment.title == 'Spelling list'
    assert assignment.subject_id == family.science.id
    assert assignment.estimated_minutes == 20
    assert assignment.template_id == template.id


def test_create_rejects_bad_input_without_writing(family, other_family):
    ctx = family.parent_ctx
    assert create_assignment(ctx, {'title': '', 'student_ids': [family.leo.id]})['kind'] == 'validation'
    assert create_assignment(ctx, {'title': 'X', 'student_ids': []})['kind'] == 'validation'
    assert create_assignment(ctx, {'title': 'X', 'student_ids': [family.leo.id, other_family.ava.id]})['kind'] == 'validation'
    assert create_assignment(ctx, {'title': 'X', 'student_ids': [family.leo.id], 'estimated_minutes': 481})['kind'] == 'validation'
    assert create_assignment(ctx, {'title': 'X', 'student_ids': [family.leo.id], 'priority': 'URGENT'})['kind'] == 'validation'
    assert create_assignment(family.student_ctx, {'title': 'X', 'student_ids': [family.leo.id]})['kind'] == 'authorization'
    assert Assignment.query.count() == 0


@pytest.mark.parametrize('student_ids', [5, '5', {'id': 5}, [None], ['abc']])
def test_create_rejects_malformed_student_ids(family, student_ids):
    result = create_assignment(family.parent_ctx, {'title': 'X', 'student_ids': student_ids})
    assert result['kind'] == 'validation'
    assert Assignment.query.count() == 0


def test_student_completes_own_assignment(family, make_assignment):
    assignment = make_assignment(subject=family.math, title='Fractions')

    result = update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED')

    assert result == {'success': True, 'status': COMPLETED}
    assert assignment.status == COMPLETED
    assert assignment.completed_date is not None
    log = ActivityLog.query.filter_by(action='STATUS_CHANGED').one()
    assert log.details == 'ASSIGNED → COMPLETED'
    assert log.user_id == family.student_user.id
    parent_notes = notifications_for(family.parent, NotificationType.STATUS_CHANGED)
    assert len(parent_notes) == 1
    assert parent_notes[0].message == 'Leo Rivera completed "Fractions"'
    assert parent_notes[0].assignment_id == assignment.id


def test_completion_with_grade(family, make_assignment):
    assignment = make_assignment()
    update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED', grade_label='a-')

    assert assignment.grade_label == 'A-'
    assert assignment.grade_value == 91


def test_bad_grade_leaves_assignment_untouched(family, make_assignment):
    assignment = make_assignment()
    result = update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED', grade_label='Z')

    assert result['kind'] == 'validation'
    db.session.refresh(assignment)
    assert assignment.status == ASSIGNED
    assert ActivityLog.query.count() == 0
    assert Notification.query.count() == 0


@pytest.mark.parametrize('grade_value', ['nan', float('nan'), 'inf', '-inf', 101, -1, 'ninety'])
def test_non_finite_or_out_of_range_grade_is_rejected(family, make_assignment, grade_value):
    assignment = make_assignment()
    result = update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED', grade_value=grade_value)

    assert result['kind'] == 'validation'
    db.session.refresh(assignment)
    assert assignment.status == ASSIGNED
    assert assignment.grade_value is None
    assert ActivityLog.query.count() == 0


def test_student_cannot_complete_someone_elses_work(family, make_assignment):
    assignment = make_assignment(student=family.ava)
    result = update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED')

    assert result == {'success': False, 'error': 'This is not your assignment', 'kind': 'authorization'}


def test_parent_cannot_complete(family, make_assignment):
    assignment = make_assignment()
    result = update_assignment_status(family.parent_ctx, assignment.id, 'COMPLETED')
    assert result['kind'] == 'authorization'


def test_other_family_cannot_see_assignment(family, other_family, make_assignment):
    assignment = make_assignment()
    result = update_assignment_status(other_family.student_ctx, assignment.id, 'COMPLETED')
    assert result['kind'] == 'not_found'


def test_return_requires_feedback(family, make_assignment):
    assignment = make_assignment(status=COMPLETED)
    result = update_assignment_status(family.parent_ctx, assignment.id, 'ASSIGNED', comment='   ')

    assert result['kind'] == 'validation'
    assert assignment.status == COMPLETED


def test_parent_returns_with_feedback(family, make_assignment):
    assignment = make_assignment(status=COMPLETED, title='Essay')

    result = update_assignment_status(family.parent_ctx, assignment.id, 'ASSIGNED', comment='Add a conclusion')

    assert result['success'] is True
    assert assignment.status == ASSIGNED
    assert assignment.completed_date is None
    comment = Comment.query.one()
    assert comment.content == 'Add a conclusion'
    assert comment.author_role == 'PARENT'
    notes = notifications_for(family.student_user, NotificationType.STATUS_CHANGED)
    assert [n.message for n in notes] == ['Maria Rivera returned "Essay"']


def test_invalid_and_legacy_statuses(family, make_assignment):
    assignment = make_assignment()
    assert update_assignment_status(family.student_ctx, assignment.id, 'SUBMITTED')['kind'] == 'validation'

    legacy = make_assignment(status='SUBMITTED')
    assert update_assignment_status(family.student_ctx, legacy.id, 'COMPLETED')['kind'] == 'transition'
    assert update_assignment_status(family.parent_ctx, legacy.id, 'ASSIGNED', comment='Redo')['kind'] == 'transition'


def test_completing_twice_is_rejected(family, make_assignment):
    assignment = make_assignment()
    update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED')
    result = update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED')
    assert result['success'] is False
    assert ActivityLog.query.filter_by(action='STATUS_CHANGED').count() == 1


def test_transitions_keep_goals_current(family, make_assignment):
    today = date.today()
    goal = Goal(
        title='Math practice', target_count=2, student_id=family.leo.id, subject_id=family.math.id,
        family_id=family.family.id, term_start=date(today.year, 1, 1), term_end=date(today.year, 12, 31)
    )
    db.session.add(goal)
    db.session.commit()
    assignment = make_assignment(subject=family.math)

    update_assignment_status(family.student_ctx, assignment.id, 'COMPLETED')
    assert db.session.get(Goal, goal.id).current_count == 1

    update_assignment_status(family.parent_ctx, assignment.id, 'ASSIGNED', comment='Show your work')
    assert db.session.get(Goal, goal.id).current_count == 0


def test_grade_assignment(family, make_assignment):
    open_assignment = make_assignment()
    assert grade_assignment(family.parent_ctx, open_assignment.id, 'A')['kind'] == 'validation'

    done = make_assignment(status=COMPLETED, title='Quiz 3')
    result = grade_assignment(family.parent_ctx, done.id, 'b+')

    assert result == {'success': True, 'grade_label': 'B+', 'grade_value': 88}
    notes = notifications_for(family.student_user, NotificationType.GRADE_POSTED)
    assert notes[0].message == 'Maria Rivera graded "Quiz 3": B+'

    cleared = grade_assignment(family.parent_ctx, done.id, '')
    assert cleared['grade_label'] is None and cleared['grade_value'] is None
    assert grade_assignment(family.student_ctx, done.id, 'A')['kind'] == 'authorization'


def test_comments_notify_the_other_side(family, make_assignment):
    assignment = make_assignment()

    assert add_comment(family.parent_ctx, assignment.id, 'Nice start')['success'] is True
    assert len(notifications_for(family.student_user, NotificationType.COMMENT_ADDED)) == 1

    assert add_comment(family.student_ctx, assignment.id, 'Thanks!')['success'] is True
    assert len(notifications_for(family.parent, NotificationType.COMMENT_ADDED)) == 1

    assert add_comment(family.parent_ctx, assignment.id, '')['kind'] == 'validation'
    assert add_comment(family.parent_ctx, assignment.id, 'x' * 2001)['kind'] == 'validation'
    assert Comment.query.count() == 2


def test_update_assignment(family, make_assignment):
    assignment = make_assignment(subject=family.math)
    result = update_assignment(family.parent_ctx, assignment.id, {
        'title': 'Decimals', 'priority': 'high', 'subject_id': family.science.id, 'due_date': '09/30/2025'
    })

    assert result == {'success': True}
    assert assignment.title == 'Decimals'
    assert assignment.priority == 'HIGH'
    assert assignment.subject_id == family.science.id
    assert assignment.due_date == date(2025, 9, 30)
    assert ActivityLog.query.filter_by(action='UPDATED').count() == 1


def test_delete_cascades_comments_and_keeps_notifications(family, make_assignment):
    assignment = make_assignment()
    add_comment(family.student_ctx, assignment.id, 'Done soon')

    assert delete_assignment(family.parent_ctx, assignment.id) == {'success': True}

    assert Assignment.query.count() == 0
    assert Comment.query.count() == 0
    assert ActivityLog.query.filter_by(action='COMMENT_ADDED').count() == 0
    assert ActivityLog.query.filter_by(action='DELETED').count() == 1
    note = Notification.query.one()
    assert note.assignment_id is None


def test_list_assignments_scoping(family, other_family, make_assignment):
    make_assignment(title='Leo work')
    make_assignment(student=family.ava, title='Ava work', status=COMPLETED)

    assert len(list_assignments(family.parent_ctx)) == 2
    assert [a.title for a in list_assignments(family.student_ctx)] == ['Leo work']
    assert [a.title for a in list_assignments(family.parent_ctx, status=COMPLETED)] == ['Ava work']
    assert list_assignments(other_family.parent_ctx) == []
