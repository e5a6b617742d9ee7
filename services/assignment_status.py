"""
Assignment status transitions.

The table below is the whole state machine: ASSIGNED -> COMPLETED by the
student, COMPLETED -> ASSIGNED (return for revision) by a parent.
"""

from constants import AssignmentStatus, Role, LEGACY_STATUSES
from error_handler import AuthorizationError, TransitionError

VALID_TRANSITIONS = {
    AssignmentStatus.ASSIGNED: {
        'roles': frozenset({Role.STUDENT}),
        'to': frozenset({AssignmentStatus.COMPLETED}),
    },
    AssignmentStatus.COMPLETED: {
        'roles': frozenset({Role.PARENT, Role.SUPER_ADMIN}),
        'to': frozenset({AssignmentStatus.ASSIGNED}),
    },
}


def _rule_for(status):
    try:
        return VALID_TRANSITIONS.get(AssignmentStatus(status))
    except ValueError:
        return None


def check_transition(current_status, requested_status, role):
    """
    Raise if `role` may not move an assignment from `current_status` to
    `requested_status`.

    Raises:
        TransitionError: unknown current status, or target not reachable.
        AuthorizationError: role not allowed to act on the current status.
    """
    rule = _rule_for(current_status)
    if rule is None:
        if current_status in LEGACY_STATUSES:
            raise TransitionError(f"Invalid current status: {current_status} is no longer supported")
        raise TransitionError(f"Invalid current status: {current_status}")

    try:
        role = Role(role)
    except ValueError:
        raise AuthorizationError("You don't have permission for this action")
    if role not in rule['roles']:
        raise AuthorizationError("You don't have permission for this action")

    try:
        requested = AssignmentStatus(requested_status)
    except ValueError:
        requested = None
    if requested not in rule['to']:
        raise TransitionError(f"Cannot change from {_value(current_status)} to {_value(requested_status)}")


def can_transition(current_status, requested_status, role):
    """True iff the transition table allows it."""
    try:
        check_transition(current_status, requested_status, role)
    except (TransitionError, AuthorizationError):
        return False
    return True


def _value(status):
    return getattr(status, 'value', status)
