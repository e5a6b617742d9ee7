"""
Bulk assignment creation from CSV text.

The whole file is validated first; any bad row blocks the batch, so either
every row is created or none is.
"""

import csv
import io

from flask import current_app

from error_handler import service_action, ValidationError
from extensions import db
from models import Student, Subject
from .assignments import create_assignment_rows
from .validation import (
    clean_text, require_title, optional_long_text, parse_date, parse_priority,
    parse_estimated_minutes
)

COLUMN_ALIASES = {
    'student_name': 'student',
    'subject_name': 'subject',
    'due': 'due_date',
    'minutes': 'estimated_minutes',
}
REQUIRED_COLUMNS = ('title', 'student')


def _normalize_header(name):
    key = (name or '').strip().lower().replace(' ', '_')
    return COLUMN_ALIASES.get(key, key)


def parse_csv_rows(text):
    """Yield (line_number, row) with normalized column names."""
    reader = csv.DictReader(io.StringIO(text, newline=''))
    if not reader.fieldnames:
        raise ValidationError("The CSV file is empty")
    reader.fieldnames = [_normalize_header(name) for name in reader.fieldnames]
    missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
    if missing:
        raise ValidationError(f"Missing required column(s): {', '.join(missing)}")

    for row_num, row in enumerate(reader, start=2):  # header is line 1
        if not any((value or '').strip() for key, value in row.items() if key is not None):
            continue
        yield row_num, row


def _check_row(row, students, subjects):
    """Return (fields, problems) for one CSV row."""
    problems = []
    fields = {}

    def attempt(key, parse):
        try:
            fields[key] = parse()
        except ValidationError as e:
            problems.append(e.message)

    attempt('title', lambda: require_title(row.get('title')))
    attempt('description', lambda: optional_long_text(row.get('description')))
    attempt('due_date', lambda: parse_date(clean_text(row.get('due_date')), 'Due date'))
    attempt('priority', lambda: parse_priority(clean_text(row.get('priority'))))
    attempt('estimated_minutes', lambda: parse_estimated_minutes(clean_text(row.get('estimated_minutes'))))

    student_name = clean_text(row.get('student'))
    if not student_name:
        problems.append("Student is required")
    elif student_name.lower() not in students:
        problems.append(f"Student '{student_name}' not found")
    else:
        fields['student_id'] = students[student_name.lower()]

    subject_name = clean_text(row.get('subject'))
    fields['subject_id'] = None
    if subject_name:
        if subject_name.lower() not in subjects:
            problems.append(f"Subject '{subject_name}' not found")
        else:
            fields['subject_id'] = subjects[subject_name.lower()]

    return fields, problems


@service_action
def import_assignments_csv(ctx, text):
    """
    Create assignments from CSV text.

    Required columns: title, student. Optional: description, subject,
    due_date, priority, estimated_minutes.

    Returns:
        {'success': True, 'count': n} or
        {'success': False, 'error': ..., 'kind': 'validation', 'errors': [...]}
    """
    ctx.require_parent("Only parents can import assignments")
    if not text or not text.strip():
        raise ValidationError("The CSV file is empty")

    students = {
        s.name.strip().lower(): s.id
        for s in Student.query.filter_by(family_id=ctx.family_id).all()
    }
    subjects = {
        s.name.strip().lower(): s.id
        for s in Subject.query.filter_by(family_id=ctx.family_id).all()
    }

    max_rows = current_app.config.get('CSV_IMPORT_MAX_ROWS', 500)
    rows = []
    errors = []
    for row_num, row in parse_csv_rows(text):
        if len(rows) + len(errors) >= max_rows:
            raise ValidationError(f"Too many rows; at most {max_rows} can be imported at once")
        fields, problems = _check_row(row, students, subjects)
        if problems:
            errors.append(f"Row {row_num}: {'; '.join(problems)}")
        else:
            rows.append(fields)

    if errors:
        current_app.logger.warning(f"CSV import rejected for family {ctx.family_id}: {len(errors)} bad row(s)")
        return {
            'success': False,
            'error': f"{len(errors)} row(s) have errors; nothing was imported",
            'kind': ValidationError.kind,
            'errors': errors,
        }
    if not rows:
        raise ValidationError("The CSV file has no assignment rows")

    assignments = create_assignment_rows(ctx, rows)
    db.session.commit()

    current_app.logger.info(f"Imported {len(assignments)} assignment(s) for family {ctx.family_id}")
    return {'success': True, 'count': len(assignments)}
