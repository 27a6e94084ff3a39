"""Domain exceptions raised by the ticket engine and rendered by the API."""

from typing import Iterable


class HelpdeskError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = 500

    def __init__(self, detail: str, valid_values: Iterable[str] | None = None):
        super().__init__(detail)
        self.detail = detail
        self.valid_values = list(valid_values) if valid_values is not None else None

    def to_dict(self) -> dict:
        body: dict = {"detail": self.detail}
        if self.valid_values is not None:
            body["valid_values"] = self.valid_values
        return body


class BadRequestError(HelpdeskError):
    status_code = 400


class ValidationError(BadRequestError):
    """Malformed input, e.g. a bad roll number or an unknown status value."""


class InvalidRollNumberFormat(ValidationError):
    pass


class GraduatedError(ValidationError):
    pass


class InvalidEnrollmentYear(ValidationError):
    pass


class AuthenticationError(HelpdeskError):
    status_code = 401


class AuthorizationError(HelpdeskError):
    status_code = 403


class NotFoundError(HelpdeskError):
    status_code = 404


class ConflictError(HelpdeskError):
    status_code = 409


class PayloadTooLargeError(HelpdeskError):
    status_code = 413
