"""Exception hierarchy for the loss report service.

Every exception raised on purpose by the service derives from
``BaseAPIException`` so the global handler can turn it into a uniform
error response.
"""

from typing import Any, Optional


class BaseAPIException(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class ValidationError(BaseAPIException):
    """Submitted report fields are missing or out of range. Nothing was written."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class ResourceNotFoundError(BaseAPIException):
    """Requested resource does not exist."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            details={"resource": resource, "id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id


NotFoundError = ResourceNotFoundError


class StorageUnavailableError(BaseAPIException):
    """The durable store cannot be reached. Callers may retry later."""

    status_code = 503
    error_code = "STORAGE_UNAVAILABLE"

    def __init__(self, message: str = "Storage is unavailable, try again later", **kwargs):
        super().__init__(message, **kwargs)


class DatabaseError(BaseAPIException):
    """Unexpected database failure."""

    status_code = 500
    error_code = "DATABASE_ERROR"
