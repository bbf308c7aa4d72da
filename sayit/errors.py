"""
Error taxonomy
Every failure the API reports maps onto one of these classes
"""


class SayitError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500
    error = 'server_error'
    message = 'An unexpected error occurred'

    def __init__(self, message=None, error=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if error:
            self.error = error

    def to_dict(self):
        return {
            'success': False,
            'message': self.message,
            'error': self.error,
        }


class ValidationError(SayitError):
    """Malformed or missing input, with per-field detail"""

    status_code = 400
    error = 'validation_error'
    message = 'Invalid input'

    def __init__(self, message=None, fields=None, error=None):
        super().__init__(message, error)
        self.fields = fields or {}

    def to_dict(self):
        data = super().to_dict()
        if self.fields:
            data['fields'] = self.fields
        return data


class AuthenticationError(SayitError):
    status_code = 401
    error = 'auth_failed'
    message = 'Authentication required'


class Forbidden(SayitError):
    status_code = 403
    error = 'access_denied'
    message = 'Access denied'


class NotFound(SayitError):
    status_code = 404
    error = 'not_found'
    message = 'Resource not found'


class Conflict(SayitError):
    status_code = 409
    error = 'conflict'
    message = 'Resource already exists'


class UpstreamFailure(SayitError):
    """Object storage or database unavailable"""

    status_code = 503
    error = 'upstream_failure'
    message = 'A dependent service is unavailable'
