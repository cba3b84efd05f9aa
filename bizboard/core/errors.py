"""
Domain error hierarchy.

Every error raised by services carries a user-facing Hebrew message and the
HTTP status code the API layer answers with. The exception handlers in
``bizboard.server.exception_handlers`` turn these into JSON responses.
"""

from __future__ import annotations


class BizBoardError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 400
    default_message: str = "שגיאה בשרת"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(BizBoardError):
    status_code = 400
    default_message = "בקשה לא תקינה"


class NotFoundError(BizBoardError):
    status_code = 404
    default_message = "הרשומה לא נמצאה"


class ConflictError(BizBoardError):
    status_code = 409
    default_message = "הרשומה כבר קיימת"


class DomainValidationError(BizBoardError):
    status_code = 422
    default_message = "נא למלא את כל השדות הנדרשים"


class AuthenticationError(BizBoardError):
    status_code = 401
    default_message = "לא מחובר"


class PermissionDeniedError(BizBoardError):
    status_code = 403
    default_message = "אין הרשאה לעסק זה"


class InactiveBusinessError(BizBoardError):
    status_code = 409
    default_message = "לא ניתן להוסיף הוצאות לעסק לא פעיל"


class PayloadTooLargeError(BizBoardError):
    status_code = 413
    default_message = "הקובץ גדול מדי"


class ServiceUnavailableError(BizBoardError):
    status_code = 503
    default_message = "השירות אינו זמין"


class StorageError(BizBoardError):
    status_code = 500
    default_message = "שגיאה בהעלאה"
