from datetime import date, datetime

from constants import AssignmentStatus
from extensions import db
from models import Goal
from services.goals import create_goal, update_goal, delete_goal, list_goals
from utils.goal_progress import recalculate_goal_progress, recalculate_goals_for_assignment

COMPLETED = AssignmentStatus.COMPLETED.value


def add_goal(family, target=5, subject=None, student=None,
             term_start=date(2025, 9, 1), term_end=date(2025, 9, 30)):
    goal = Goal(
        title='Finish worksheets',
        target_count=target,
        student_id=(student or family.leo).id,
        subject_id=subject.id if subject else None,
        family_id=family.family.id,
        term_start=term_start,
        term_end=term_end
    )
    db.session.add(goal)
    db.session.commit()
    return goal


def test_count_is_clamped_to_target(family, make_assignment):
    goal = add_goal(family, target=5)
    for _ in range(7):
        make_assignment(status=COMPLETED)

    assert recalculate_goal_progress(goal) == 5
    assert goal.current_count == 5


def test_completion_after_term_end_is_not_counted(family, make_assignment):
    goal = add_goal(family, target=10)
    make_assignment(status=COMPLETED, completed_date=datetime(2025, 9, 30, 23, 30))
    make_assignment(status=COMPLETED, completed_date=datetime(2025, 10, 1, 0, 0))
    make_assignment(status=COMPLETED, completed_date=datetime(2025, 8, 31, 23, 59))

    assert recalculate_goal_progress(goal) == 1


def test_only_completed_assignments_count(family, make_assignment):
    goal = add_goal(family)
    make_assignment(status=COMPLETED)
    make_assignment()

    assert recalculate_goal_progress(goal) == 1


def test_subject_goal_ignores_other_subjects(family, make_assignment):
    goal = add_goal(family, subject=family.math)
    make_assignment(subject=family.math, status=COMPLETED)
    make_assignment(subject=family.science, status=COMPLETED)
    make_assignment(status=COMPLETED)

    assert recalculate_goal_progress(goal) == 1


def test_other_students_are_not_counted(family, make_assignment):
    goal = add_goal(family)
    make_assignment(student=family.ava, status=COMPLETED)

    assert recalculate_goal_progress(goal) == 0


def test_recalculation_is_idempotent(family, make_assignment):
    goal = add_goal(family)
    make_assignment(status=COMPLETED)
    make_assignment(status=COMPLETED)

    assert [recalculate_goal_progress(goal) for _ in range(3)] == [2, 2, 2]


def test_uncompleting_lowers_a_satisfied_goal(family, make_assignment):
    goal = add_goal(family, target=1)
    assignment = make_assignment(status=COMPLETED)
    recalculate_goal_progress(goal)
    assert goal.current_count == 1

    assignment.status = AssignmentStatus.ASSIGNED.value
    assignment.completed_date = None
    recalculate_goals_for_assignment(family.leo.id, family.family.id, None)
    assert goal.current_count == 0


def test_recalculate_for_assignment_selects_subject_and_general_goals(family, make_assignment):
    math_goal = add_goal(family, subject=family.math)
    general_goal = add_goal(family)
    science_goal = add_goal(family, subject=family.science)
    make_assignment(subject=family.math, status=COMPLETED)

    touched = recalculate_goals_for_assignment(family.leo.id, family.family.id, family.math.id)

    assert {g.id for g in touched} == {math_goal.id, general_goal.id}
    assert math_goal.current_count == 1
    assert general_goal.current_count == 1
    assert science_goal.current_count == 0


def test_ended_terms_are_recalculated_too(family, make_assignment):
    goal = add_goal(family, term_start=date(2020, 1, 1), term_end=date(2020, 1, 31))
    make_assignment(status=COMPLETED, completed_date=datetime(2020, 1, 15, 9, 0))

    recalculate_goals_for_assignment(family.leo.id, family.family.id, None)
    assert goal.current_count == 1


def goal_values(family, **overrides):
    values = {
        'title': 'Read 10 books',
        'student_id': family.leo.id,
        'target_count': 3,
        'term_start': '2025-09-01',
        'term_end': '2025-09-30',
    }
    values.update(overrides)
    return values


def test_create_goal_counts_existing_work(family, make_assignment):
    make_assignment(status=COMPLETED)
    result = create_goal(family.parent_ctx, goal_values(family))

    assert result['success'] is True
    assert result['current_count'] == 1


def test_create_goal_validation(family):
    result = create_goal(family.parent_ctx, goal_values(family, target_count=0))
    assert result['kind'] == 'validation'

    result = create_goal(family.parent_ctx, goal_values(family, term_end='2025-08-01'))
    assert result['kind'] == 'validation'

    result = create_goal(family.parent_ctx, goal_values(family, target_count=1000))
    assert result['kind'] == 'validation'
    assert Goal.query.count() == 0


def test_students_cannot_manage_goals(family):
    result = create_goal(family.student_ctx, goal_values(family))
    assert result == {
        'success': False,
        'error': 'Only parents can create goals',
        'kind': 'authorization',
    }


def test_goal_for_another_family_student_is_not_found(family, other_family):
    result = create_goal(family.parent_ctx, goal_values(family, student_id=other_family.leo.id))
    assert result['kind'] == 'not_found'


def test_update_goal_recalculates(family, make_assignment):
    make_assignment(subject=family.science, status=COMPLETED)
    goal_id = create_goal(family.parent_ctx, goal_values(family, subject_id=family.math.id))['goal_id']

    result = update_goal(family.parent_ctx, goal_id, goal_values(family, subject_id=family.science.id))

    assert result == {'success': True, 'current_count': 1}


def test_delete_and_list_goals(family, other_family):
    goal_id = create_goal(family.parent_ctx, goal_values(family))['goal_id']
    create_goal(family.parent_ctx, goal_values(family, student_id=family.ava.id))
    create_goal(other_family.parent_ctx, goal_values(other_family))

    assert len(list_goals(family.parent_ctx)) == 2
    assert [g.id for g in list_goals(family.student_ctx)] == [goal_id]

    assert delete_goal(family.parent_ctx, goal_id) == {'success': True}
    assert delete_goal(other_family.parent_ctx, goal_id)['kind'] == 'not_found'
    assert len(list_goals(family.parent_ctx)) == 1
