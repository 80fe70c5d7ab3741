from preventa.core.exceptions import (
    PreventaException,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    AIServiceError,
    AuthenticationError,
    DataFetchError,
    MalformedRecordError,
)

__all__ = [
    "PreventaException",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "AIServiceError",
    "AuthenticationError",
    "DataFetchError",
    "MalformedRecordError",
]
