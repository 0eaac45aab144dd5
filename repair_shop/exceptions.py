"""
Service-level exceptions.

Services and the consistency coordinator raise these instead of bare
``ValueError`` so that the blueprint error handlers can map each
failure class to its HTTP status without inspecting message text::

    NotFoundError      -> 404
    ConflictError      -> 409
    InvalidInputError  -> 400

Every one of them is raised before any store or cache mutation, so a
caller that catches one can assume nothing changed.
"""


class ServiceError(Exception):
    """Base class for expected, client-visible service failures."""

    status_code: int = 500
    error: str = "server_error"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        """Return the JSON body sent to API clients."""
        body = {"error": self.error, "message": self.message}
        if self.field is not None:
            body["field"] = self.field
        return body


class NotFoundError(ServiceError):
    """A referenced id does not exist in the store."""

    status_code = 404
    error = "not_found"


class ConflictError(ServiceError):
    """A uniqueness constraint (email, phone, VIN, ...) would be violated."""

    status_code = 409
    error = "conflict"


class InvalidInputError(ServiceError):
    """A required field is missing or blank, or a bounded field is out of range."""

    status_code = 400
    error = "bad_request"
