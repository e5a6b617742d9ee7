"""
GPA arithmetic over already-loaded assignments.

Everything here is pure: callers fetch the assignments (optionally filtered
by date range) and the subject weights, these functions only do the math.
Grades live on a 0-100 scale.
"""

import math
from collections import defaultdict

from constants import LETTER_GRADE_VALUES, LETTER_GRADE_THRESHOLDS
from error_handler import ValidationError


def round_one_decimal(value):
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _mean(values):
    return sum(values) / len(values)


def normalize_weights(weights):
    """
    Accept a {category: percent} mapping or an iterable of weight rows and
    return a dict holding only categories with a positive weight.
    """
    if not weights:
        return {}
    if hasattr(weights, 'items'):
        pairs = weights.items()
    else:
        pairs = ((w.category, w.weight) for w in weights)
    return {category: float(weight) for category, weight in pairs if weight and weight > 0}


def compute_subject_gpa(assignments, weights=None):
    """
    Subject GPA for one student's assignments, or None when nothing is graded.

    Without weights this is the plain mean. With weights, each weighted
    category contributes its mean times weight/100; categories that are not
    weighted (or assignments with no category) form an "uncategorized"
    bucket. When both buckets hold grades the two averages are blended in
    proportion to how many graded assignments each bucket holds, so an
    unweighted assignment never drops out of the average.
    """
    graded = [a for a in assignments if a.grade_value is not None]
    if not graded:
        return None

    weight_map = normalize_weights(weights)
    if not weight_map:
        return round_one_decimal(_mean([a.grade_value for a in graded]))

    by_category = defaultdict(list)
    uncategorized = []
    for a in graded:
        if a.category in weight_map:
            by_category[a.category].append(a.grade_value)
        else:
            uncategorized.append(a.grade_value)

    weighted_sum = 0.0
    total_weight_used = 0.0
    for category, values in by_category.items():
        weight = weight_map[category]
        weighted_sum += _mean(values) * (weight / 100)
        total_weight_used += weight

    weighted_count = sum(len(values) for values in by_category.values())
    uncategorized_count = len(uncategorized)

    if uncategorized_count == 0:
        result = weighted_sum / total_weight_used * 100
    elif weighted_count == 0:
        result = _mean(uncategorized)
    else:
        weighted_avg = weighted_sum / total_weight_used * 100
        uncategorized_avg = _mean(uncategorized)
        result = (
            weighted_avg * weighted_count + uncategorized_avg * uncategorized_count
        ) / (weighted_count + uncategorized_count)

    return round_one_decimal(result)


def compute_overall_gpa(assignments, weights_by_subject=None):
    """
    Mean of the per-subject GPAs. Assignments without a subject form one
    unweighted bucket. Returns None when no subject has a GPA.
    """
    weights_by_subject = weights_by_subject or {}
    by_subject = defaultdict(list)
    for a in assignments:
        by_subject[a.subject_id].append(a)

    subject_gpas = []
    for subject_id, subject_assignments in by_subject.items():
        weights = weights_by_subject.get(subject_id) if subject_id is not None else None
        gpa = compute_subject_gpa(subject_assignments, weights)
        if gpa is not None:
            subject_gpas.append(gpa)

    if not subject_gpas:
        return None
    return round_one_decimal(_mean(subject_gpas))


def gpa_to_letter_label(gpa):
    """Letter band for a 0-100 grade. Ties go to the higher band."""
    if gpa is None:
        return None
    for threshold, label in LETTER_GRADE_THRESHOLDS:
        if gpa >= threshold:
            return label
    return 'F'


def letter_to_numeric(label):
    """Stored numeric value for a letter grade picked by a parent."""
    key = (label or '').strip().upper()
    if key not in LETTER_GRADE_VALUES:
        raise ValidationError(f"Unknown letter grade: {label}")
    return LETTER_GRADE_VALUES[key]
