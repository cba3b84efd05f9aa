"""Unit tests for the domain error hierarchy."""

import pytest

from bizboard.core.errors import (
    AuthenticationError,
    BadRequestError,
    BizBoardError,
    ConflictError,
    DomainValidationError,
    InactiveBusinessError,
    NotFoundError,
    PayloadTooLargeError,
    PermissionDeniedError,
    ServiceUnavailableError,
    StorageError,
)


@pytest.mark.parametrize(
    "error_class,status_code",
    [
        (BadRequestError, 400),
        (AuthenticationError, 401),
        (PermissionDeniedError, 403),
        (NotFoundError, 404),
        (ConflictError, 409),
        (InactiveBusinessError, 409),
        (PayloadTooLargeError, 413),
        (DomainValidationError, 422),
        (StorageError, 500),
        (ServiceUnavailableError, 503),
    ],
)
def test_status_codes(error_class, status_code):
    error = error_class()
    assert isinstance(error, BizBoardError)
    assert error.status_code == status_code


def test_default_message_used_when_none_given():
    assert AuthenticationError().message == "לא מחובר"
    assert str(InactiveBusinessError()) == "לא ניתן להוסיף הוצאות לעסק לא פעיל"


def test_custom_message_overrides_default():
    error = ConflictError("כבר קיים רישום לתאריך זה")
    assert error.message == "כבר קיים רישום לתאריך זה"
    assert str(error) == error.message
