"""Translation of workspace error kinds for an HTTP calling layer."""

import logging

from fastapi import HTTPException, status

from promptspace.core import messages
from promptspace.core.errors import ErrorKind, WorkspaceError


logger = logging.getLogger("promptspace.api.errors")


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVARIANT_VIOLATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(error: WorkspaceError) -> HTTPException:
    """Build the HTTPException a route should raise for ``error``."""
    status_code = STATUS_BY_KIND[error.kind]

    if error.kind is ErrorKind.INVARIANT_VIOLATION:
        # Defect details stay in the logs
        logger.error("Invariant violation surfaced to caller: %s", error.message)
        return HTTPException(status_code=status_code, detail=messages.ERROR_INTERNAL)

    detail: object = error.message
    if error.kind is ErrorKind.VALIDATION and error.details:
        detail = {"error": error.message, "details": error.details}
    return HTTPException(status_code=status_code, detail=detail)
