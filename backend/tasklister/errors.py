# Overview: Error taxonomy shared by services and routes.

"""
Tasklister error hierarchy.

Services raise these; routes turn them into ``{"error": message}`` JSON
responses using ``status_code``. Anything that is not a TasklisterError is
treated as an unexpected failure and reported as a generic 500.
"""


class TasklisterError(Exception):
    """Base class for request failures with a defined HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(TasklisterError):
    """400-level input problem (missing or blank required field)."""

    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(TasklisterError):
    """401: missing bearer token or bad admin credentials."""

    status_code = 401
    default_message = "Invalid credentials"


class InvalidSessionError(TasklisterError):
    """
    403: the presented session claim could not be verified.

    Bad signature, expiry, malformed payload and a claim issued for another
    instance all map here with the same message.
    """

    status_code = 403
    default_message = "Invalid session token"


class ForbiddenError(TasklisterError):
    """403: authenticated but not allowed (role, ownership, or task state)."""

    status_code = 403
    default_message = "Permission denied"


class NotFoundError(TasklisterError):
    """404: slug or task does not resolve."""

    status_code = 404
    default_message = "Not found"


class TaskUnavailableError(NotFoundError):
    """404: take attempted on a task that is missing or no longer available."""

    default_message = "Task does not exist or is already taken"


class ServerError(TasklisterError):
    """500: store or transaction failure (already rolled back)."""

    status_code = 500
    default_message = "Internal server error"
