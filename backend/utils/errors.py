"""
Application error taxonomy.

Services raise these instead of leaking storage or HTTP client errors; the
handlers registered in ``main`` turn them into ``{error, code, details?}``
responses with the matching status code.
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base exception for all 10xCards application errors."""
    code = "UNKNOWN_ERROR"
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class UnauthorizedError(AppError):
    """Raised when the request carries no authenticated user."""
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Unauthorized"


class AccessDeniedError(AppError):
    """Raised when a resource exists but belongs to another user."""
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Access denied"


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class DuplicateEntryError(AppError):
    """Raised on a unique constraint violation."""
    code = "DUPLICATE_ENTRY"
    status_code = 409
    default_message = "Resource already exists"


class ConstraintViolationError(AppError):
    """Raised on a foreign key, check or not-null violation."""
    code = "CONSTRAINT_VIOLATION"
    status_code = 400
    default_message = "Constraint violation"


class ValidationError(AppError):
    """Raised when input fails validation."""
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request data"


class InvalidCardsError(AppError):
    """Raised when finalize references candidates outside the job."""
    code = "INVALID_CARDS"
    status_code = 400
    default_message = "Some card IDs do not belong to this generation"


class RateLimitExceededError(AppError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class DatabaseError(AppError):
    code = "DATABASE_ERROR"
    status_code = 500
    default_message = "Database error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        super().__init__(message, details)
        if status_code is not None:
            self.status_code = status_code


class ExternalServiceError(AppError):
    """Raised when the LLM completion API fails."""
    code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502
    reason = "API_ERROR"
    retryable = False
    default_message = "External service error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None,
                 retryable: Optional[bool] = None):
        super().__init__(message, details)
        if retryable is not None:
            self.retryable = retryable


class ExternalAuthenticationError(ExternalServiceError):
    reason = "AUTHENTICATION_ERROR"
    default_message = "Invalid API key or unauthorized access"


class ExternalRateLimitError(ExternalServiceError):
    reason = "RATE_LIMIT_ERROR"
    retryable = True
    default_message = "Rate limit exceeded for the completion API"


class InvalidModelError(ExternalServiceError):
    reason = "INVALID_MODEL_ERROR"
    default_message = "Invalid model specified"


class ContextLengthError(ExternalServiceError):
    reason = "CONTEXT_LENGTH_ERROR"
    default_message = "Input exceeds the model's context length"


class ResponseParseError(ExternalServiceError):
    reason = "JSON_PARSE_ERROR"
    default_message = "Failed to parse the model response"


class UnknownError(AppError):
    code = "UNKNOWN_ERROR"
    status_code = 500
