"""Error taxonomy shared by the generation, lifecycle and dashboard layers.

Every error carries a human-readable message and a machine-distinguishable
``kind`` so that callers (API, CLI, dashboard) can report it verbatim.
"""

from typing import Any


class AssetForgeError(Exception):
    """Base class for all assetforge errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "kind": self.kind,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AssetForgeError):
    """Bad caller input; recoverable by correcting the input."""

    kind = "validation_error"
    status_code = 422


class NotFoundError(AssetForgeError):
    kind = "not_found"
    status_code = 404


class TemplateNotFoundError(NotFoundError):
    kind = "template_not_found"


class InvalidStateError(AssetForgeError):
    """A version transition was attempted from a disallowed state."""

    kind = "invalid_state"
    status_code = 409


class PersistenceError(AssetForgeError):
    """Storage rejected a write, typically a name collision."""

    kind = "persistence_error"
    status_code = 409

    def __init__(
        self,
        message: str,
        conflicting_names: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.conflicting_names = list(conflicting_names or [])
        merged = dict(details or {})
        if self.conflicting_names:
            merged["conflicting_names"] = self.conflicting_names
        super().__init__(message, merged)


class QueryError(AssetForgeError):
    kind = "query_error"
    status_code = 503
