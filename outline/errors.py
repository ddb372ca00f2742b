from __future__ import annotations

from enum import Enum


class ReorderErrorType(Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    SERVER = "server"
    UNKNOWN = "unknown"


class ReorderError(Exception):
    """A failed call to the item store, classified for the user."""

    def __init__(self, message, error_type=ReorderErrorType.UNKNOWN, details=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ReorderError({self.message!r}, {self.error_type.value}, status_code={self.status_code})"


def error_type_for_status(status_code: int) -> ReorderErrorType:
    if status_code == 400:
        return ReorderErrorType.VALIDATION
    if status_code in (401, 403):
        return ReorderErrorType.AUTHORIZATION
    if status_code == 404:
        return ReorderErrorType.NOT_FOUND
    if status_code in (500, 502, 503):
        return ReorderErrorType.SERVER
    return ReorderErrorType.UNKNOWN


def error_from_response(response) -> ReorderError:
    """Build a ReorderError from a non-2xx HTTP response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}
    message = body.get("error") or "Something went wrong"
    return ReorderError(message, error_type_for_status(response.status_code), body.get("details"), response.status_code)


FRIENDLY_MESSAGES = {
    ReorderErrorType.VALIDATION: "Please check the submitted order and try again",
    ReorderErrorType.AUTHORIZATION: "You do not have permission to perform this action",
    ReorderErrorType.NOT_FOUND: "The requested resource could not be found",
    ReorderErrorType.NETWORK: "Connection error. Please check your network connection",
    ReorderErrorType.SERVER: "A server error occurred. Please try again later",
}


def friendly_message(error: Exception) -> str:
    if isinstance(error, ReorderError):
        return FRIENDLY_MESSAGES.get(error.error_type) or error.message or "An unexpected error occurred"
    return str(error) or "An unexpected error occurred"
