"""
Reports: progress (completion and GPA per student and subject) and
attendance (hours and school days).
"""

import csv
import io
from collections import defaultdict
from datetime import datetime, time, timedelta

from constants import AssignmentStatus
from models import Assignment, Student, Subject
from .grade_calculation import (
    compute_subject_gpa, compute_overall_gpa, gpa_to_letter_label, round_one_decimal
)
from .attendance import list_attendance_logs
from .validation import parse_date

NO_SUBJECT = 'No Subject'


def completion_rate(total, completed):
    if not total:
        return 0
    return round(completed / total * 100)


def _summary(assignments):
    total = len(assignments)
    completed = sum(1 for a in assignments if a.status == AssignmentStatus.COMPLETED.value)
    return {
        'total': total,
        'completed': completed,
        'completion_rate': completion_rate(total, completed),
    }


def build_progress_report(ctx, date_from=None, date_to=None):
    """
    Per-student progress, filtered by assigned date. date_to is inclusive.

    Returns a list of dicts, one per student, each with a 'subjects' list.
    """
    date_from = parse_date(date_from, 'Start date')
    date_to = parse_date(date_to, 'End date')

    students_query = Student.query.filter_by(family_id=ctx.family_id)
    if ctx.is_student:
        students_query = students_query.filter_by(user_id=ctx.user_id)
    students = students_query.order_by(Student.name).all()

    subjects = {s.id: s for s in Subject.query.filter_by(family_id=ctx.family_id).all()}
    weights_by_subject = {subject_id: s.weight_map() for subject_id, s in subjects.items()}

    report = []
    for student in students:
        query = Assignment.query.filter_by(family_id=ctx.family_id, student_id=student.id)
        if date_from:
            query = query.filter(Assignment.assigned_date >= datetime.combine(date_from, time.min))
        if date_to:
            query = query.filter(Assignment.assigned_date < datetime.combine(date_to + timedelta(days=1), time.min))
        assignments = query.all()

        by_subject = defaultdict(list)
        for a in assignments:
            by_subject[a.subject_id].append(a)

        subject_rows = []
        for subject_id, subject_assignments in by_subject.items():
            subject = subjects.get(subject_id)
            weights = weights_by_subject.get(subject_id) or {}
            gpa = compute_subject_gpa(subject_assignments, weights)
            row = _summary(subject_assignments)
            row.update({
                'subject_id': subject_id,
                'subject': subject.name if subject else NO_SUBJECT,
                'gpa': gpa,
                'letter': gpa_to_letter_label(gpa),
                'weighted': any(w > 0 for w in weights.values()),
            })
            subject_rows.append(row)
        subject_rows.sort(key=lambda r: (r['subject_id'] is None, r['subject'].lower()))

        overall = compute_overall_gpa(assignments, weights_by_subject)
        entry = _summary(assignments)
        entry.update({
            'student_id': student.id,
            'student': student.name,
            'gpa': overall,
            'letter': gpa_to_letter_label(overall),
            'subjects': subject_rows,
        })
        report.append(entry)

    return report


def progress_report_csv(report):
    """Render a progress report as CSV text, one line per student and subject."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['Student', 'Subject', 'Total', 'Completed', 'Completion %', 'GPA', 'Letter'])
    for entry in report:
        for row in entry['subjects']:
            writer.writerow([
                entry['student'], row['subject'], row['total'], row['completed'],
                row['completion_rate'],
                '' if row['gpa'] is None else row['gpa'],
                row['letter'] or ''
            ])
        writer.writerow([
            entry['student'], 'Overall', entry['total'], entry['completed'],
            entry['completion_rate'],
            '' if entry['gpa'] is None else entry['gpa'],
            entry['letter'] or ''
        ])
    return output.getvalue()


def build_attendance_report(ctx, date_from=None, date_to=None):
    """
    Hours and distinct school days for the family, with per-student and
    per-subject breakdowns. Students and subjects with no hours are left out.
    Parents only; both date bounds are inclusive.
    """
    logs = list_attendance_logs(ctx, date_from=date_from, date_to=date_to)

    students = Student.query.filter_by(family_id=ctx.family_id).order_by(Student.name).all()
    subjects = Subject.query.filter_by(family_id=ctx.family_id).order_by(Subject.name).all()

    hours_by_student = defaultdict(float)
    days_by_student = defaultdict(set)
    hours_by_subject = defaultdict(float)
    for log in logs:
        hours_by_student[log.student_id] += log.hours_logged
        days_by_student[log.student_id].add(log.date)
        if log.subject_id:
            hours_by_subject[log.subject_id] += log.hours_logged

    student_rows = []
    for student in students:
        hours = hours_by_student.get(student.id, 0)
        if not hours:
            continue
        days = len(days_by_student[student.id])
        student_rows.append({
            'student_id': student.id,
            'student': student.name,
            'hours': round_one_decimal(hours),
            'days': days,
            'avg_per_day': round_one_decimal(hours / days) if days else 0,
        })

    subject_rows = [
        {'subject_id': subject.id, 'subject': subject.name, 'hours': round_one_decimal(hours_by_subject[subject.id])}
        for subject in subjects
        if hours_by_subject.get(subject.id)
    ]

    return {
        'total_hours': round_one_decimal(sum(log.hours_logged for log in logs)),
        'days': len({log.date for log in logs}),
        'students': student_rows,
        'subjects': subject_rows,
    }


def attendance_report_csv(logs):
    """Render attendance logs as CSV text, one line per log."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['Date', 'Student', 'Subject', 'Hours', 'Notes'])
    for log in logs:
        writer.writerow([
            log.date.isoformat(),
            log.student.name if log.student else '',
            log.subject.name if log.subject else '',
            f'{log.hours_logged:g}',
            log.notes or ''
        ])
    return output.getvalue()
