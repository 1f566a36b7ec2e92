"""Typed failures raised by the services and mapped to HTTP responses in ``main``."""

from fastapi import status

from leaveflow.constants.constants import RATE_LIMIT_MESSAGE


class LeaveflowError(Exception):
    """Base class for every failure the API reports to its callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LeaveflowError):
    default_message = "Invalid input"


class InvalidCredentials(LeaveflowError):
    default_message = "Invalid credentials"


class Unauthenticated(LeaveflowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthenticated"


class Forbidden(LeaveflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(LeaveflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidRange(LeaveflowError):
    default_message = "End date cannot be before start date"


class Overlap(LeaveflowError):
    default_message = "Leave request overlaps an existing request"


class InsufficientBalance(LeaveflowError):
    default_message = "Insufficient leave balance"


class InvalidTransition(LeaveflowError):
    default_message = "Invalid status transition"


class RateLimited(LeaveflowError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = RATE_LIMIT_MESSAGE
