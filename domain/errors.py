"""
Domain error taxonomy.

Services raise these; the API layer translates them into HTTP responses:

- ValidationError -> 400 (malformed input, carries field-level detail)
- NotFoundError   -> 404 (referenced entity does not exist)
- ConflictError   -> 409 (valid request, entity in the wrong state)

Store failures are not part of this taxonomy. Repositories raise
RuntimeError for them and the API reports a generic 500.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional


class DomainError(Exception):
    """Base class for expected, client-facing failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Raised when input is malformed (bad tax id, unknown webhook status)."""

    def __init__(
        self,
        field: Optional[str] = None,
        error: Optional[str] = None,
        *,
        errors: Optional[Mapping[str, List[str]]] = None,
    ) -> None:
        collected: Dict[str, List[str]] = {k: list(v) for k, v in (errors or {}).items()}
        if field is not None and error is not None:
            collected.setdefault(field, []).append(error)

        self.errors = collected
        if field is not None:
            super().__init__(f"Validation failed for {field}")
        else:
            super().__init__("Validation failed")


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, key: object) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} with key '{key}' was not found.")


class ConflictError(DomainError):
    """Raised when the request is valid but the entity's current state forbids it."""


class DuplicateRecordError(Exception):
    """
    Raised by repositories when an insert violates a unique index.

    Not a client-facing error: callers that can resolve the conflict
    (customer by document, house salesperson by employee code) catch it and
    re-read the existing row.
    """

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        self.detail = detail
        super().__init__(f"Duplicate record in {table}: {detail}" if detail else f"Duplicate record in {table}")


__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "DuplicateRecordError",
]
