"""
Domain errors raised by the service layer.

Routes let these propagate; the handler registered in aerojob.main turns
them into {"detail": ...} JSON payloads with the matching status code.
"""


class AeroJobError(Exception):
    """Base application exception."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AeroJobError):
    """Resource is absent, or exists but is not visible to the caller."""

    status_code = 404


class SurveyValidationError(AeroJobError):
    """Malformed survey definition or incomplete answers."""

    status_code = 400

    def __init__(self, message: str, question_text: str = None):
        super().__init__(message)
        self.question_text = question_text


class ConflictError(AeroJobError):
    """A response already exists for this survey and participant."""

    status_code = 403


class InvalidReferenceError(AeroJobError):
    """An id string does not have a valid ObjectId shape."""

    status_code = 400


__all__ = [
    "AeroJobError",
    "ConflictError",
    "InvalidReferenceError",
    "NotFoundError",
    "SurveyValidationError",
]
