"""
Error taxonomy for the scoring core.

Every error carries the HTTP status and machine-readable code the JSON
views answer with, so the view layer can map them without a lookup table.
"""


class ArenaError(Exception):
    status_code = 400
    code = 'error'
    retryable = False
    default_message = 'Request could not be processed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {'message': self.message, 'code': self.code, 'retryable': self.retryable}


class NotFound(ArenaError):
    status_code = 404
    code = 'not_found'
    default_message = 'Not found'


class AlreadySolved(ArenaError):
    status_code = 400
    code = 'already_solved'
    default_message = 'Challenge already solved'


class ValidationError(ArenaError):
    """Rejected write; ``field_errors`` maps field names to messages."""
    status_code = 400
    code = 'validation_error'
    default_message = 'Invalid data'

    def __init__(self, message=None, field_errors=None):
        super().__init__(message)
        self.field_errors = field_errors or {}

    @classmethod
    def from_form(cls, form, message=None):
        errors = {field: [str(e) for e in messages] for field, messages in form.errors.items()}
        return cls(message, field_errors=errors)

    def as_dict(self):
        data = super().as_dict()
        data['errors'] = self.field_errors
        return data


class AuthFailure(ArenaError):
    status_code = 401
    code = 'auth_failure'
    default_message = 'Invalid credentials'


class PermissionDenied(ArenaError):
    status_code = 403
    code = 'permission_denied'
    default_message = 'Admin access required'


class ContestClosed(ArenaError):
    status_code = 403
    code = 'contest_closed'
    default_message = 'The contest is not accepting submissions'


class ConcurrencyConflict(ArenaError):
    status_code = 503
    code = 'concurrency_conflict'
    retryable = True
    default_message = 'Submission is busy, please retry'
