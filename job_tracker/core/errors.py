"""
Error taxonomy for the tracker.

Services raise these; the API layer turns each into a JSON response with
the carried status code. NotFoundError is used both for rows that do not
exist and for rows owned by someone else.
"""
from typing import Any, Dict, List, Optional


class TrackerError(Exception):
    """Base class for all expected request failures"""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(TrackerError):
    status_code = 400

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class AuthError(TrackerError):
    status_code = 401


class NotFoundError(TrackerError):
    status_code = 404

    @classmethod
    def for_resource(cls, resource: str) -> "NotFoundError":
        return cls(f"{resource} not found")


class ConflictError(TrackerError):
    status_code = 409
