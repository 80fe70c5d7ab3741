"""Custom exception classes for the Preventa backend."""

from typing import Any, Optional


class PreventaException(Exception):
    """Base exception for the Preventa backend."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(PreventaException):
    """Resource not found error."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)},
        )


class ValidationError(PreventaException):
    """Input validation error."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validation error on {field}: {message}",
            code="VALIDATION_ERROR",
            status_code=422,
            details={"field": field},
        )


class ConflictError(PreventaException):
    """Resource already exists."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} already exists: {identifier}",
            code="CONFLICT",
            status_code=409,
            details={"resource": resource, "identifier": str(identifier)},
        )


class ExternalServiceError(PreventaException):
    """Base class for external service errors."""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"External service error ({service}): {message}",
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details={"service": service},
        )


class AIServiceError(ExternalServiceError):
    """LLM text-completion service error."""

    def __init__(self, message: str):
        super().__init__(service="OpenAI", message=message)
        self.code = "AI_SERVICE_ERROR"


class AuthenticationError(PreventaException):
    """Authentication required or failed."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=401,
        )


class DataFetchError(PreventaException):
    """A single progress category could not read its source data.

    Recovered by the progress aggregator, never surfaced to clients.
    """

    def __init__(self, category: str, message: str):
        super().__init__(
            message=f"Failed to fetch {category} data: {message}",
            code="DATA_FETCH_FAILED",
            status_code=502,
            details={"category": category},
        )
        self.category = category


class MalformedRecordError(PreventaException):
    """A stored record could not be parsed into its expected shape."""

    def __init__(self, collection: str, record_id: Any, message: str):
        super().__init__(
            message=f"Malformed {collection} record {record_id}: {message}",
            code="MALFORMED_RECORD",
            status_code=500,
            details={"collection": collection, "record_id": str(record_id)},
        )
        self.collection = collection
