"""
Shared utilities and helper functions for family routes.
"""

from flask import request, jsonify
from flask_login import current_user

from error_handler import status_code_for
from services.context import RequestContext


def current_context():
    """RequestContext for the logged-in user."""
    return RequestContext.from_user(current_user)


def request_data(list_fields=()):
    """JSON body, falling back to form fields. Repeated form keys named in
    list_fields come back as lists."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
        for field in list_fields:
            if field in request.form:
                data[field] = request.form.getlist(field)
    return data


def respond(result):
    """Serialize a service result with the status code matching its kind."""
    return jsonify(result), status_code_for(result)
