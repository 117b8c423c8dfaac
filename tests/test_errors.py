"""Tests for error kinds and their HTTP translation."""

import pytest
from fastapi import HTTPException, status

from promptspace.api import STATUS_BY_KIND, to_http_exception
from promptspace.core import messages
from promptspace.core.errors import (
    ConflictError,
    ErrorKind,
    ForbiddenError,
    InputValidationError,
    InvariantViolationError,
    NotFoundError,
    parse_payload,
)
from promptspace.prompts import RevertRequest


class TestErrorKinds:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        "error_cls, kind",
        [
            (NotFoundError, ErrorKind.NOT_FOUND),
            (ForbiddenError, ErrorKind.FORBIDDEN),
            (ConflictError, ErrorKind.CONFLICT),
            (InputValidationError, ErrorKind.VALIDATION),
            (InvariantViolationError, ErrorKind.INVARIANT_VIOLATION),
        ],
    )
    def test_each_error_carries_its_kind(self, error_cls, kind):
        error = error_cls()

        assert error.kind is kind
        assert error.message
        assert str(error) == error.message

    def test_every_kind_has_a_status(self):
        assert set(STATUS_BY_KIND) == set(ErrorKind)


class TestParsePayload:
    """Tests for schema validation at operation boundaries."""

    def test_instance_passes_through(self):
        request = RevertRequest(version=2)

        assert parse_payload(RevertRequest, request) is request

    def test_none_is_validated_as_empty(self):
        with pytest.raises(InputValidationError) as exc_info:
            parse_payload(RevertRequest, None)

        assert exc_info.value.details[0]["loc"] == ("version",)


class TestHttpTranslation:
    """Tests for mapping errors to HTTPException."""

    def test_not_found(self):
        exc = to_http_exception(NotFoundError(messages.PROMPT_NOT_FOUND))

        assert isinstance(exc, HTTPException)
        assert exc.status_code == status.HTTP_404_NOT_FOUND
        assert exc.detail == messages.PROMPT_NOT_FOUND

    def test_forbidden_and_conflict(self):
        assert to_http_exception(ForbiddenError()).status_code == status.HTTP_403_FORBIDDEN
        assert to_http_exception(ConflictError()).status_code == status.HTTP_409_CONFLICT

    def test_validation_details_are_exposed(self):
        error = InputValidationError(details=[{"loc": ["name"], "msg": "required"}])

        exc = to_http_exception(error)

        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.detail == {
            "error": messages.ERROR_VALIDATION,
            "details": [{"loc": ["name"], "msg": "required"}],
        }

    def test_invariant_violation_hides_message(self):
        exc = to_http_exception(InvariantViolationError("Version 2 is not greater than 5"))

        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.detail == messages.ERROR_INTERNAL
