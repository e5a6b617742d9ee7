from functools import wraps
from flask import abort
from flask_login import current_user

from constants import PARENT_ROLES


def parent_required(f):
    """Restricts access to users with the 'PARENT' or 'SUPER_ADMIN' roles."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)  # Unauthorized - not logged in
        if current_user.role not in {r.value for r in PARENT_ROLES}:
            abort(403)  # Forbidden - wrong role
        return f(*args, **kwargs)
    return decorated_function

