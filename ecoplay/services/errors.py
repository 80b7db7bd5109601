"""
Domain errors raised by the ledger and admin services.

All of them are client-facing and non-fatal; routers translate them into
HTTP responses using `status_code`.
"""


class LedgerError(Exception):
    """Base class for business-rule failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Missing or malformed input."""


class MissingField(ValidationError):
    def __init__(self, *fields: str):
        names = ", ".join(fields)
        super().__init__(f"Missing required field(s): {names}")
        self.fields = fields


class DuplicateSubmission(LedgerError):
    status_code = 409


class VerificationFailed(LedgerError):
    status_code = 422


class InsufficientPoints(LedgerError):
    status_code = 400


class AlreadyCompleted(LedgerError):
    status_code = 409


class NotFound(LedgerError):
    status_code = 404


class NotAuthorized(LedgerError):
    status_code = 403


class NotAuthenticated(LedgerError):
    status_code = 401
