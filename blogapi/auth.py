"""
Access control: bearer token -> Principal, plus role gates.

The resolved principal is handed to each view as its first positional
argument; nothing is stashed on ``g`` or read back through a global.
"""
from dataclasses import dataclass
from datetime import datetime
from functools import wraps

from flask import current_app
from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request

from blogapi.errors import Forbidden, Unauthorized
from blogapi.extensions import db
from blogapi.models import MAX_ID, Role, User


@dataclass(frozen=True)
class Principal:
    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    created_at: datetime

    @classmethod
    def from_user(cls, user):
        return cls(id=user.id, first_name=user.first_name, last_name=user.last_name,
                   email=user.email, role=user.role, created_at=user.created_at)

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
            'role': self.role.value,
            'createdAt': self.created_at.isoformat()
        }


def issue_token(user):
    return create_access_token(identity=str(user.id))


def authenticate():
    """Verify the request's bearer token and load its subject."""
    verify_jwt_in_request()
    try:
        user_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        raise Unauthorized('Invalid token')

    user = db.session.get(User, user_id) if 0 < user_id <= MAX_ID else None
    if user is None:
        raise Unauthorized('Invalid token')
    return Principal.from_user(user)


def require_role(principal, role):
    if principal.role is not role:
        current_app.logger.warning('User %s (%s) denied %s-only access',
                                   principal.id, principal.role.value, role.value)
        raise Forbidden(f'{role.value.capitalize()} access required')
    return principal


def auth_required(role=None):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = authenticate()
            if role is not None:
                require_role(principal, role)
            return fn(principal, *args, **kwargs)
        return wrapper
    return decorator


author_required = auth_required(Role.AUTHOR)
reader_required = auth_required(Role.READER)
