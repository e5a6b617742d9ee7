"""
Subjects, their category weights, and assignment templates.
"""

import math

from flask import current_app

from constants import Category, SUBJECT_COLORS
from error_handler import service_action, ValidationError, NotFoundError, InvariantViolation
from extensions import db
from models import Subject, SubjectWeight, AssignmentTemplate, Assignment, AttendanceLog
from .validation import require_title, clean_text, optional_long_text, parse_estimated_minutes


def _get_subject(ctx, subject_id):
    subject = Subject.query.filter_by(id=subject_id, family_id=ctx.family_id).first()
    if not subject:
        raise NotFoundError("Subject not found")
    return subject


def next_subject_color(family_id):
    """Cycle the palette by the number of subjects the family already has."""
    count = Subject.query.filter_by(family_id=family_id).count()
    return SUBJECT_COLORS[count % len(SUBJECT_COLORS)]


def _clean_color(value):
    color = clean_text(value)
    if color is None:
        return None
    if len(color) != 7 or not color.startswith('#'):
        raise ValidationError("Color must look like #RRGGBB")
    try:
        int(color[1:], 16)
    except ValueError:
        raise ValidationError("Color must look like #RRGGBB")
    return color.upper()


@service_action
def create_subject(ctx, name, color=None):
    ctx.require_parent("Only parents can manage subjects")
    subject = Subject(
        name=require_title(name, 'Name'),
        color=_clean_color(color) or next_subject_color(ctx.family_id),
        family_id=ctx.family_id
    )
    db.session.add(subject)
    db.session.commit()
    return {'success': True, 'subject_id': subject.id, 'color': subject.color}


@service_action
def update_subject(ctx, subject_id, name=None, color=None):
    ctx.require_parent("Only parents can manage subjects")
    subject = _get_subject(ctx, subject_id)
    if name is not None:
        subject.name = require_title(name, 'Name')
    if color is not None:
        subject.color = _clean_color(color) or subject.color
    db.session.commit()
    return {'success': True}


@service_action
def delete_subject(ctx, subject_id):
    ctx.require_parent("Only parents can manage subjects")
    subject = _get_subject(ctx, subject_id)
    in_use = Assignment.query.filter_by(subject_id=subject.id, family_id=ctx.family_id).count()
    if in_use:
        raise ValidationError(f"Cannot delete subject with {in_use} assignment(s)")
    AssignmentTemplate.query.filter_by(subject_id=subject.id).update({'subject_id': None})
    AttendanceLog.query.filter_by(subject_id=subject.id).update({'subject_id': None})
    db.session.delete(subject)
    db.session.commit()
    return {'success': True}


@service_action
def update_subject_weights(ctx, subject_id, weights):
    """
    Replace the category weights of a subject.

    Args:
        weights: mapping of category -> percentage, or a list of
            {'category', 'weight'} dicts. Categories left out are removed.
    """
    ctx.require_parent("Only parents can change subject weights")

    if isinstance(weights, dict):
        pairs = list(weights.items())
    else:
        try:
            pairs = [(entry['category'], entry['weight']) for entry in weights or []]
        except (KeyError, TypeError):
            raise ValidationError("Each weight needs a category and a weight")

    cleaned = {}
    for category, weight in pairs:
        try:
            key = Category(str(category).strip().upper()).value
        except ValueError:
            raise ValidationError(f"Invalid category: {category}")
        try:
            value = float(weight)
        except (TypeError, ValueError):
            raise ValidationError(f"Weight for {key} must be a number")
        if not math.isfinite(value):
            raise ValidationError(f"Weight for {key} must be a number")
        if value < 0 or value > 100:
            raise ValidationError(f"Weight for {key} must be between 0 and 100")
        cleaned[key] = value
    if not cleaned:
        raise ValidationError("No weights given")

    total = sum(cleaned.values())
    # Half-up, so 100.5 is out and 99.5 is in
    if math.floor(total + 0.5) != 100:
        raise InvariantViolation(f"Weights must add up to 100% (got {total:g}%)")

    subject = _get_subject(ctx, subject_id)

    existing = {w.category: w for w in subject.weights}
    for category, row in existing.items():
        if category not in cleaned:
            subject.weights.remove(row)
    for category, value in cleaned.items():
        row = existing.get(category)
        if row:
            row.weight = value
        else:
            subject.weights.append(SubjectWeight(category=category, weight=value))

    db.session.commit()
    current_app.logger.info(f"Updated weights for subject {subject.id}: {subject.weight_map()}")
    return {'success': True, 'weights': subject.weight_map()}


def list_subjects(ctx):
    return Subject.query.filter_by(family_id=ctx.family_id).order_by(Subject.name).all()


def subject_to_dict(subject):
    return {
        'id': subject.id,
        'name': subject.name,
        'color': subject.color,
        'weights': subject.weight_map(),
    }


# Templates

def _clean_template_values(ctx, values):
    subject_id = values.get('subject_id') or None
    if subject_id:
        _get_subject(ctx, subject_id)
    return {
        'title': require_title(values.get('title')),
        'description': optional_long_text(values.get('description')),
        'subject_id': subject_id,
        'estimated_minutes': parse_estimated_minutes(values.get('estimated_minutes')),
    }


def _get_template(ctx, template_id):
    template = AssignmentTemplate.query.filter_by(id=template_id, family_id=ctx.family_id).first()
    if not template:
        raise NotFoundError("Template not found")
    return template


@service_action
def create_template(ctx, values):
    ctx.require_parent("Only parents can manage templates")
    template = AssignmentTemplate(family_id=ctx.family_id, **_clean_template_values(ctx, values))
    db.session.add(template)
    db.session.commit()
    return {'success': True, 'template_id': template.id}


@service_action
def update_template(ctx, template_id, values):
    ctx.require_parent("Only parents can manage templates")
    template = _get_template(ctx, template_id)
    for field, value in _clean_template_values(ctx, values).items():
        setattr(template, field, value)
    db.session.commit()
    return {'success': True}


@service_action
def delete_template(ctx, template_id):
    ctx.require_parent("Only parents can manage templates")
    template = _get_template(ctx, template_id)
    Assignment.query.filter_by(template_id=template.id).update({'template_id': None})
    db.session.delete(template)
    db.session.commit()
    return {'success': True}


def list_templates(ctx):
    return AssignmentTemplate.query.filter_by(family_id=ctx.family_id).order_by(AssignmentTemplate.title).all()


def template_to_dict(template):
    return {
        'id': template.id,
        'title': template.title,
        'description': template.description,
        'subject_id': template.subject_id,
        'estimated_minutes': template.estimated_minutes,
    }
