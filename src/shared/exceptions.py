# src/shared/exceptions.py
from fastapi import HTTPException, status


class BaseHTTPException(HTTPException):
    """HTTPException with a class-level status code and default message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=message or self.message)


# Authentication & Authorization Exceptions
class InvalidTokenError(BaseHTTPException):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Missing or invalid token"


class NotAuthenticatedError(BaseHTTPException):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required."


class NotAuthorizedError(BaseHTTPException):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not authorized"


class ProjectAccessDeniedError(BaseHTTPException):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You do not have permission in this project."


class AuthNotConfiguredError(BaseHTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Token verification not configured"


# Resource Not Found Exceptions
class ResourceNotFoundError(BaseHTTPException):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


# Validation / Request Exceptions
class InvalidDataError(BaseHTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request data"


# Infrastructure Exceptions
class ServiceUnavailableError(BaseHTTPException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Unable to verify permissions right now."
