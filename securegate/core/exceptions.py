"""
Application exceptions.

Services raise these; the API layer maps them to HTTP responses
via the handlers registered in ``securegate.main``.
"""

from typing import Any, Dict, Optional


class SecureGateError(Exception):
    """Base exception for all SecureGate errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class BadRequestError(SecureGateError):
    """Invalid input or an invalid state transition."""

    status_code = 400
    error_code = "bad_request"


class ConflictError(BadRequestError):
    """Duplicate name or duplicate active association."""

    error_code = "conflict"


class NotFoundError(SecureGateError):
    """Referenced record does not exist (or is soft-deleted)."""

    status_code = 404
    error_code = "not_found"


class UnauthorizedError(SecureGateError):
    """Authentication failed or the caller lacks the required roles/permissions."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(self, message: str = "Unauthorized", **kwargs: Any):
        super().__init__(message, **kwargs)


class ForbiddenError(SecureGateError):
    """Authenticated but not allowed."""

    status_code = 403
    error_code = "forbidden"

    def __init__(self, message: str = "Permission denied", **kwargs: Any):
        super().__init__(message, **kwargs)
