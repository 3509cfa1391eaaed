"""
Error types raised by the interview core.

Every error carries the HTTP status the API layer reports and whether the
caller may retry the same logical step.
"""
from typing import Optional


class InterviewError(Exception):
    """Base class for all interview service errors."""

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, interview_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.interview_id = interview_id

    def to_dict(self):
        payload = {
            "error": type(self).__name__,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.interview_id:
            payload["interview_id"] = self.interview_id
        return payload


class ValidationError(InterviewError):
    """Request is missing required data; rejected before any collaborator call."""
    status_code = 400


class SessionNotFoundError(InterviewError):
    status_code = 404


class SessionBusyError(InterviewError):
    """Another turn is already in flight for this interview."""
    status_code = 409
    retryable = True


class StaleHistoryError(InterviewError):
    """The caller's turn history does not match the committed history."""
    status_code = 409


class InvalidStateError(InterviewError):
    """The action is not allowed in the session's current state."""
    status_code = 409


class TranscriptionError(InterviewError):
    """Speech-to-text collaborator failed or returned nothing usable."""
    status_code = 502
    retryable = True


class GenerationError(InterviewError):
    """Generative model call failed."""
    status_code = 502
    retryable = True


class SynthesisError(InterviewError):
    """Text-to-speech failed. Never surfaced to API callers."""
    status_code = 502
    retryable = True


class PersistenceError(InterviewError):
    """Storage collaborator failed; in-memory session state is still valid."""
    status_code = 503
    retryable = True
