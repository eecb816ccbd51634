# transaction_api/core/exceptions.py
"""Domain errors raised by the service layer.

Each error carries an ``ErrorCode`` (machine-readable code, default message,
HTTP status). The API layer turns them into JSON responses; nothing below the
API layer knows about HTTP beyond the status number stored here.

Code ranges:
    1000-1999  parameter validation
    2000-2999  transaction lookups
    3000-3999  idempotency
    5000-5999  system errors
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    PARAM_VALIDATION_FAILED = (1001, "Parameter validation failed", 400)
    TRANSACTION_NOT_FOUND = (2001, "Transaction not found", 404)
    IDEMPOTENCY_KEY_REQUIRED = (3001, "Idempotency-Key header is required", 400)
    REPEATED_REQUEST = (3002, "Repeated request", 409)
    INTERNAL_SERVER_ERROR = (5000, "Internal server error", 500)

    def __init__(self, code: int, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status


class TransactionServiceError(Exception):
    """Base class for every error the service surfaces to callers."""

    error_code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.error_code.message
        self.details = details
        super().__init__(self.message)

    @property
    def code(self) -> int:
        return self.error_code.code

    @property
    def http_status(self) -> int:
        return self.error_code.http_status

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, message={self.message!r})"


class ValidationError(TransactionServiceError):
    """Malformed or missing input. ``details`` maps field name to message."""

    error_code = ErrorCode.PARAM_VALIDATION_FAILED


class NotFoundError(TransactionServiceError):
    error_code = ErrorCode.TRANSACTION_NOT_FOUND


class IdempotencyRequiredError(TransactionServiceError):
    error_code = ErrorCode.IDEMPOTENCY_KEY_REQUIRED


class DuplicateRequestError(TransactionServiceError):
    """The idempotency key was already consumed within its window."""

    error_code = ErrorCode.REPEATED_REQUEST


class InternalError(TransactionServiceError):
    error_code = ErrorCode.INTERNAL_SERVER_ERROR
