"""
Quiz engine error taxonomy.

Every error carries the HTTP status it maps to; the handlers registered in
``quiz_engine.main`` render them as JSON. Policy violations also carry a
machine-readable ``reason`` so clients can tell, for example, an attempt
that was already submitted from one that ran out of time.
"""
from typing import Optional


class QuizEngineError(Exception):
    status_code = 500
    error = "internal_error"

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason


class NotFoundError(QuizEngineError):
    status_code = 404
    error = "not_found"


class ForbiddenError(QuizEngineError):
    status_code = 403
    error = "forbidden"


class PolicyViolation(QuizEngineError):
    status_code = 400
    error = "policy_violation"

    NO_ATTEMPTS_REMAINING = "no_attempts_remaining"
    QUIZ_NOT_OPEN = "quiz_not_open"
    QUIZ_CLOSED = "quiz_closed"
    ALREADY_SUBMITTED = "already_submitted"
    ATTEMPT_EXPIRED = "attempt_expired"

    def __init__(self, reason: str, message: str):
        super().__init__(message, reason=reason)


class ConflictError(QuizEngineError):
    status_code = 409
    error = "conflict"
