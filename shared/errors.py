"""
Shared error handling for the Analysis service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.localization import get_message


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    error: str
    message: str
    message_key: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ServiceException(Exception):
    """Base exception for Analysis service errors.

    ``message_key`` is a stable catalogue key; the human readable text is
    resolved per request language when the error is rendered.
    """

    status_code: int = 400
    reason: str = "Bad Request"

    def __init__(self, code: str, message_key: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message_key = message_key
        self.details = details or {}
        super().__init__(message_key)

    def to_response(self, lang: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            error=self.reason,
            message=get_message(self.message_key, lang),
            message_key=self.message_key,
            details=self.details,
        )


class AuthenticationError(ServiceException):
    """Caller has no verifiable identity."""

    status_code = 401
    reason = "Unauthorized"

    def __init__(self, message_key: str = "Error_Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message_key, details)


class AuthorizationError(ServiceException):
    """Caller is identified but may not see the requested data."""

    status_code = 403
    reason = "Forbidden"

    def __init__(self, message_key: str = "Error_Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message_key, details)


class NotFoundError(ServiceException):
    """Requested record does not exist."""

    status_code = 404
    reason = "Not Found"

    def __init__(self, message_key: str = "Error_NotFound", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message_key, details)


class ExternalServiceError(ServiceException):
    """A record read service failed (as opposed to returning no data)."""

    status_code = 500
    reason = "Internal Server Error"

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        merged = {"service": service, "error": message}
        merged.update(details or {})
        super().__init__("EXTERNAL_SERVICE_ERROR", "Error_InternalServer", merged)

    def __str__(self) -> str:
        return f"{self.service}: {self.details.get('error')}"
