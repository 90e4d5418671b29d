"""
Result types returned by the lead services and the CSV importer.

Gate failures, validation errors and row errors are returned, never raised, so
callers can render them field by field. Views turn them into the usual
{"error": {"code", "message", "details"}} envelope via `to_error()`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from core.leads.models import Lead


@dataclass
class Success:
    lead: Lead
    diff: dict[str, Any] = field(default_factory=dict)

    ok: ClassVar[bool] = True


@dataclass
class Deleted:
    lead_id: Any

    ok: ClassVar[bool] = True


@dataclass
class ImportSucceeded:
    imported: int
    lead_ids: list = field(default_factory=list)

    ok: ClassVar[bool] = True


@dataclass
class Failure:
    ok: ClassVar[bool] = False
    code: ClassVar[str] = "ERROR"
    http_status: ClassVar[int] = 400
    message: ClassVar[str] = "Request failed"

    def details(self) -> dict[str, Any]:
        return {}

    def to_error(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message, "details": self.details()}}


@dataclass
class ValidationFailed(Failure):
    errors: dict[str, list[str]] = field(default_factory=dict)

    code: ClassVar[str] = "VALIDATION_ERROR"
    message: ClassVar[str] = "Please fix the highlighted fields"

    def details(self):
        return {"fields": self.errors}


@dataclass
class NotFound(Failure):
    code: ClassVar[str] = "NOT_FOUND"
    http_status: ClassVar[int] = 404
    message: ClassVar[str] = "Lead not found"


@dataclass
class AuthorizationFailed(Failure):
    code: ClassVar[str] = "FORBIDDEN"
    http_status: ClassVar[int] = 403
    message: ClassVar[str] = "You can only change your own leads"


@dataclass
class ConcurrencyConflict(Failure):
    current_updated_at: Any = None

    code: ClassVar[str] = "CONFLICT"
    http_status: ClassVar[int] = 409
    message: ClassVar[str] = "Record changed, please refresh"

    def details(self):
        if self.current_updated_at is None:
            return {}
        return {"updatedAt": self.current_updated_at.isoformat()}


@dataclass
class RateLimited(Failure):
    retry_after_seconds: int = 60
    reset_at: float = 0.0

    code: ClassVar[str] = "RATE_LIMITED"
    http_status: ClassVar[int] = 429
    message: ClassVar[str] = "Too many requests. Please try again later."

    def details(self):
        return {"retry_after_seconds": self.retry_after_seconds}


@dataclass
class StorageFailure(Failure):
    error: str = ""

    code: ClassVar[str] = "STORAGE_ERROR"
    http_status: ClassVar[int] = 500
    message: ClassVar[str] = "Could not save changes"

    def details(self):
        return {"reason": self.error}


@dataclass
class ImportRejected(Failure):
    """Batch-level import failure; no row was processed or persisted."""

    MISSING_HEADERS: ClassVar[str] = "MISSING_HEADERS"
    FILE_TOO_LARGE: ClassVar[str] = "FILE_TOO_LARGE"
    INVALID_ENCODING: ClassVar[str] = "INVALID_ENCODING"
    TOO_MANY_ROWS: ClassVar[str] = "TOO_MANY_ROWS"
    EMPTY_IMPORT: ClassVar[str] = "EMPTY_IMPORT"
    NO_FILE: ClassVar[str] = "NO_FILE"

    reason: str = "INVALID_FILE"
    detail: str = ""
    missing_headers: list[str] = field(default_factory=list)

    code: ClassVar[str] = "IMPORT_REJECTED"

    def details(self):
        out = {"reason": self.reason, "message": self.detail}
        if self.missing_headers:
            out["missing_headers"] = self.missing_headers
        return out

    def to_error(self):
        payload = super().to_error()
        payload["error"]["message"] = self.detail or self.message
        return payload


@dataclass
class RowError:
    row: int
    message: str

    def as_dict(self) -> dict[str, Any]:
        return {"row": self.row, "message": self.message}


@dataclass
class RowErrors(Failure):
    errors: list[RowError] = field(default_factory=list)

    code: ClassVar[str] = "ROW_ERRORS"
    message: ClassVar[str] = "Some rows are invalid; nothing was imported"

    def details(self):
        return {"rows": [e.as_dict() for e in self.errors], "imported": 0}
