"""Failure kinds raised by the scoring core.

Each error carries a short message and the HTTP status the request layer is
expected to answer with. Nothing here is fatal: the live session and the
database stay usable after any of them.
"""


class ScoringError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'success': False, 'message': self.message}


class ValidationError(ScoringError):
    """Malformed or missing input, rejected before touching the database."""
    status_code = 400


class ParseError(ScoringError):
    """An import payload could not be read into rows."""
    status_code = 400


class PreconditionError(ScoringError):
    """The operation is not allowed in the current live session state."""
    status_code = 400


class SessionClosedError(ScoringError):
    status_code = 403


class NotFoundError(ScoringError):
    status_code = 404


class DuplicateNameError(ScoringError):
    status_code = 409


class SubmissionError(ScoringError):
    """A score sheet could not be stored; nothing from it was kept."""
    status_code = 500


class BatchImportError(ScoringError):
    """A bulk import failed part way and was rolled back entirely."""
    status_code = 500
