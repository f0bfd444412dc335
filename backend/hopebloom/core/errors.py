# hopebloom/core/errors.py
"""
Error taxonomy for the service layer.

Every expected failure is a ServiceError carrying the HTTP status and the
user-facing message. The exception handlers in main.py render them into the
{"success": false, "message": ...} envelope.
"""
from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(ServiceError):
    """Request input failed validation (first message + full list)."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors if errors is not None else [message]

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "errors": self.errors}


class ConflictError(ServiceError):
    # Duplicate username; the client sees a plain 400
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class InternalError(ServiceError):
    """Unexpected store/crypto failure. The message is always generic."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
