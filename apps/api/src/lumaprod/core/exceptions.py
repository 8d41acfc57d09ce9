"""
Custom exception classes for the LumaProd application.

These exceptions provide structured error handling throughout the application
and are mapped to appropriate HTTP status codes in the API layer.
"""

from typing import Any


class LumaProdException(Exception):
    """
    Base exception for all LumaProd-specific errors.

    Provides a consistent interface for error handling with support for
    error codes, messages, and additional details.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code for client handling
        details: Additional error details (optional)
        status_code: HTTP status code to return (default: 500)
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error context
            status_code: HTTP status code
        """
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class NotFoundError(LumaProdException):
    """
    Raised when a requested resource is not found.

    Maps to HTTP 404 Not Found.
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: str | int | None = None,
        message: str | None = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Args:
            resource_type: Type of resource (e.g., "ContentItem", "Creator")
            resource_id: ID of the resource that was not found
            message: Custom error message (optional)
        """
        if message is None:
            if resource_id is not None:
                message = f"{resource_type} with ID '{resource_id}' not found"
            else:
                message = f"{resource_type} not found"

        super().__init__(
            message=message,
            code="NOT_FOUND",
            details={
                "resource_type": resource_type,
                "resource_id": None if resource_id is None else str(resource_id),
            },
            status_code=404,
        )


class ValidationError(LumaProdException):
    """
    Raised when request validation fails.

    Maps to HTTP 422 Unprocessable Entity.

    Used for semantic validation errors beyond basic schema validation
    (which is handled by Pydantic and returns 422 automatically).
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=error_details,
            status_code=422,
        )


class AuthenticationError(LumaProdException):
    """
    Raised when authentication fails.

    Maps to HTTP 401 Unauthorized.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            details=details or {},
            status_code=401,
        )


class AuthorizationError(LumaProdException):
    """
    Raised when authorization fails.

    Maps to HTTP 403 Forbidden.

    Used when a principal is authenticated but lacks the role, or is not
    the creator assigned to the content being acted on.
    """

    def __init__(
        self,
        message: str = "Permission denied",
        resource: str | None = None,
        action: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action

        super().__init__(
            message=message,
            code="AUTHORIZATION_ERROR",
            details=details,
            status_code=403,
        )


class ConflictError(LumaProdException):
    """
    Raised when an operation conflicts with the current state.

    Maps to HTTP 409 Conflict.

    Used for duplicate content keys and already-pending generation jobs.
    """

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        if resource_type:
            error_details["resource_type"] = resource_type

        super().__init__(
            message=message,
            code="CONFLICT",
            details=error_details,
            status_code=409,
        )


class InvalidTransitionError(LumaProdException):
    """
    Raised when a lifecycle guard rejects a status transition.

    Maps to HTTP 400 Bad Request.

    Attributes:
        current_status: Status the content item was in
        action: Transition that was attempted
    """

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        action: str | None = None,
        code: str = "INVALID_TRANSITION",
    ) -> None:
        details: dict[str, Any] = {}
        if current_status:
            details["current_status"] = current_status
        if action:
            details["action"] = action

        self.current_status = current_status
        self.action = action

        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=400,
        )


class AlreadySubmittedError(InvalidTransitionError):
    """Raised when a creator submits content that is already awaiting review."""

    def __init__(self, message: str = "Content already submitted and awaiting review") -> None:
        super().__init__(
            message=message,
            current_status="submitted",
            action="submit",
            code="ALREADY_SUBMITTED",
        )


class AlreadyApprovedError(InvalidTransitionError):
    """Raised when a creator submits content that has already been approved."""

    def __init__(self, message: str = "Content already approved. Cannot re-submit.") -> None:
        super().__init__(
            message=message,
            current_status="approved",
            action="submit",
            code="ALREADY_APPROVED",
        )


class CreatorIncapableError(LumaProdException):
    """
    Raised when a creator cannot take on a content item.

    Maps to HTTP 400 Bad Request.

    Covers language, mode and capacity mismatches.
    """

    def __init__(
        self,
        message: str,
        creator_id: int | None = None,
        reason: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if creator_id is not None:
            details["creator_id"] = creator_id
        if reason:
            details["reason"] = reason

        super().__init__(
            message=message,
            code="CREATOR_INCAPABLE",
            details=details,
            status_code=400,
        )


class PoolExhaustedError(LumaProdException):
    """
    Raised when every verse in the pool has already been used.

    Maps to HTTP 409 Conflict. An operator must reset the pool.
    """

    def __init__(self, total: int) -> None:
        super().__init__(
            message=f"All {total} verses have been used. Reset the verse pool to continue.",
            code="POOL_EXHAUSTED",
            details={"total": total},
            status_code=409,
        )


class UnknownJobError(LumaProdException):
    """
    Raised when a provider callback does not match any generation attempt.

    The webhook route absorbs this error and still acknowledges receipt.
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(
            message=f"No generation attempt found for job '{job_id}'",
            code="UNKNOWN_JOB",
            details={"job_id": job_id},
            status_code=404,
        )


class ProviderError(LumaProdException):
    """
    Raised when an external service call fails or times out.

    Maps to HTTP 502 Bad Gateway.

    Used for errors from HeyGen and the email provider.
    """

    def __init__(
        self,
        service: str,
        message: str,
        original_error: str | None = None,
        retry_after: int | None = None,
        timed_out: bool = False,
    ) -> None:
        details: dict[str, Any] = {"service": service}
        if original_error:
            details["original_error"] = original_error
        if retry_after:
            details["retry_after"] = retry_after
        if timed_out:
            details["timed_out"] = True

        self.service = service
        self.original_error = original_error
        self.timed_out = timed_out

        super().__init__(
            message=message,
            code="PROVIDER_ERROR",
            details=details,
            status_code=502,
        )


class RateLimitError(ProviderError):
    """
    Raised when a provider keeps answering 429 after retries.
    """

    def __init__(
        self,
        service: str,
        message: str = "Rate limit exceeded",
        retry_after: int | None = None,
    ) -> None:
        super().__init__(service=service, message=message, retry_after=retry_after)
        self.code = "RATE_LIMIT_EXCEEDED"
        self.status_code = 429


class ServiceUnavailableError(LumaProdException):
    """
    Raised when a required integration is not configured.

    Maps to HTTP 503 Service Unavailable.
    """

    def __init__(self, message: str, service: str | None = None) -> None:
        super().__init__(
            message=message,
            code="SERVICE_UNAVAILABLE",
            details={"service": service} if service else {},
            status_code=503,
        )
