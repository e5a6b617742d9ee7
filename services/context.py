"""
Request-scoped identity passed into every workflow function.
"""

from constants import Role, PARENT_ROLES
from error_handler import AuthorizationError


class RequestContext:
    """Who is acting, and inside which family."""

    def __init__(self, user_id, user_name, role, family_id):
        self.user_id = user_id
        self.user_name = user_name or 'Unknown'
        self.role = Role(role)
        self.family_id = family_id

    @classmethod
    def from_user(cls, user):
        return cls(user.id, user.name, user.role, user.family_id)

    @property
    def is_parent(self):
        return self.role in PARENT_ROLES

    @property
    def is_student(self):
        return self.role == Role.STUDENT

    def require_parent(self, message='Only parents can do this'):
        if not self.is_parent:
            raise AuthorizationError(message)

    def __repr__(self):
        return f"RequestContext(User: {self.user_id}, {self.role.value}, Family: {self.family_id})"
