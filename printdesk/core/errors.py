"""Error taxonomy for order lifecycle operations.

Every command raises one of these; the API layer maps them onto HTTP status
codes in a single exception handler. None of them is fatal to the process.
"""
from typing import Optional


class OrderLifecycleError(Exception):
    """Base class for lifecycle failures surfaced to the caller."""

    status_code = 400
    code = "error"

    def __init__(self, message: str, *, detail: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict:
        payload = {"error": self.code, "message": self.message}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class ValidationError(OrderLifecycleError):
    """Disallowed transition or missing/invalid input. Not retried."""

    status_code = 400
    code = "validation_error"


class NotFoundError(OrderLifecycleError):
    """Referenced order, sub-order or update no longer exists."""

    status_code = 404
    code = "not_found"


class PermissionDeniedError(OrderLifecycleError):
    """Actor role is insufficient for the requested operation."""

    status_code = 403
    code = "permission_denied"


class DependencyError(OrderLifecycleError):
    """Store, storage or delivery collaborator is unreachable."""

    status_code = 503
    code = "dependency_error"
