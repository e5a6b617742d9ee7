"""
Family Routes Package

This package contains the family JSON API organized by functional area.
Each module focuses on one part of the homeschool workflow.
"""

from flask import Blueprint

# Create the main family blueprint
family_blueprint = Blueprint('family', __name__)

# Import all route modules to register their routes
from . import (
    assignments,
    goals,
    subjects,
    students,
    notifications,
    reports,
    attendance
)

# Register sub-blueprints with the main family blueprint
family_blueprint.register_blueprint(assignments.bp, url_prefix='')
family_blueprint.register_blueprint(goals.bp, url_prefix='')
family_blueprint.register_blueprint(subjects.bp, url_prefix='')
family_blueprint.register_blueprint(students.bp, url_prefix='')
family_blueprint.register_blueprint(notifications.bp, url_prefix='')
family_blueprint.register_blueprint(reports.bp, url_prefix='')
family_blueprint.register_blueprint(attendance.bp, url_prefix='')
