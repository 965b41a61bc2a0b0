"""Error taxonomy shared by services and routers.

Services raise these; the exception handlers registered in ``main`` turn them
into ``{"success": false, "message": ..., "errors": [...]}`` responses.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class MarketplaceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(MarketplaceError):
    """Bad or unsupported input; lists every offending field."""

    status_code = 400
    default_message = "Invalid input data"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None):
        super().__init__(message)
        self.errors = list(errors)

    @property
    def fields(self) -> List[str]:
        return [error.field for error in self.errors]

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = [error.to_dict() for error in self.errors]
        return payload


class AuthError(MarketplaceError):
    status_code = 401
    default_message = "Authentication required"


class PermissionDeniedError(MarketplaceError):
    status_code = 403
    default_message = "Not authorized to perform this action"


class NotFoundError(MarketplaceError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(MarketplaceError):
    status_code = 400
    default_message = "Resource already exists"


class StorageError(MarketplaceError):
    """Storage collaborator failure. Not retried here."""

    status_code = 500
    default_message = "Internal server error"
