"""
Route decorators for role checks
"""

from functools import wraps

from flask import g
from flask_jwt_extended import verify_jwt_in_request

from sayit.errors import Forbidden
from sayit.services.access import Actor


def role_required(*user_types):
    """Require a valid access token for one of the given user types; sets g.actor"""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            actor = Actor.from_jwt()
            if user_types and actor.user_type not in user_types:
                raise Forbidden('Insufficient permissions')
            actor.load()
            g.actor = actor
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def admin_required():
    """Require an active staff account with the admin role"""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            actor = Actor.from_jwt()
            if not actor.is_admin:
                raise Forbidden('Admin access required')
            actor.load()
            g.actor = actor
            return fn(*args, **kwargs)
        return wrapper
    return decorator
