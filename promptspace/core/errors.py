"""Typed error kinds raised by every workspace operation.

Callers switch on ``WorkspaceError.kind`` instead of matching message text.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError

from . import messages


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INVARIANT_VIOLATION = "invariant_violation"


class WorkspaceError(Exception):
    """Base class for all errors surfaced by the workspace core."""

    kind: ErrorKind
    default_message: str = messages.ERROR_INTERNAL

    def __init__(self, message: Optional[str] = None, *, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class NotFoundError(WorkspaceError):
    kind = ErrorKind.NOT_FOUND
    default_message = messages.ERROR_NOT_FOUND


class ForbiddenError(WorkspaceError):
    kind = ErrorKind.FORBIDDEN
    default_message = messages.ERROR_PERMISSION_DENIED


class ConflictError(WorkspaceError):
    kind = ErrorKind.CONFLICT
    default_message = messages.ERROR_CONFLICT


class InputValidationError(WorkspaceError):
    kind = ErrorKind.VALIDATION
    default_message = messages.ERROR_VALIDATION


class InvariantViolationError(WorkspaceError):
    """A write would break ledger ordering. Indicates a defect; never retried."""

    kind = ErrorKind.INVARIANT_VIOLATION
    default_message = messages.ERROR_INTERNAL


def parse_payload(schema: type[BaseModel], payload: Any) -> Any:
    """Validate ``payload`` against ``schema`` and raise VALIDATION on failure.

    Accepts an instance of the schema, a mapping, or ``None`` (treated as empty).
    """
    if isinstance(payload, schema):
        return payload
    try:
        return schema.model_validate(payload or {})
    except ValidationError as exc:
        raise InputValidationError(
            messages.ERROR_VALIDATION,
            details=exc.errors(include_url=False),
        ) from exc


def conflict_from_integrity(exc: IntegrityError, message: str) -> ConflictError:
    """Map a constraint violation reported by the database to CONFLICT."""
    error = ConflictError(message, details={"constraint": str(exc.orig)})
    error.__cause__ = exc
    return error
