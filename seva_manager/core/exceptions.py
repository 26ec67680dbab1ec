"""
Domain errors raised by the service layer.

Every error carries a human readable ``message`` and a machine friendly
``kind``; the HTTP layer renders both (see ``seva_manager.main``).
"""
from fastapi import status


class ServiceError(Exception):
    kind = "service_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self):
        return f"<{self.__class__.__name__}(kind='{self.kind}', message='{self.message}')>"


class ValidationError(ServiceError):
    """Malformed or out-of-range input."""
    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(ServiceError):
    """The caller lacks the capability for the operation."""
    kind = "authorization_error"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """Unique-constraint violations and exhausted seva capacity."""
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class StoreError(ServiceError):
    """The database is unreachable or rejected the operation for an unmodeled reason."""
    kind = "store_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
