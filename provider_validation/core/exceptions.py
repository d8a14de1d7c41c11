"""Custom exception hierarchy."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class StoreFailure(DatabaseError):
    """Storage or transport fault; surfaced unchanged so callers may retry."""

    status_code = 503


class ValidationFlowError(AppError):
    """Base exception for validation workflow rule failures."""

    title: str = "Validation Workflow Error"


class NoWorkAvailable(ValidationFlowError):
    """No provider is currently eligible for assignment."""

    status_code = 404
    title = "No Work Available"

    def __init__(self, message: str = "No providers available for validation"):
        super().__init__(message)


class SessionNotFound(ValidationFlowError):
    """The validation session does not exist."""

    status_code = 404
    title = "Session Not Found"

    def __init__(self, session_id):
        super().__init__(f"Validation session {session_id} not found")
        self.session_id = session_id


class SessionClosed(ValidationFlowError):
    """The validation session has already been completed."""

    status_code = 409
    title = "Session Closed"

    def __init__(self, session_id):
        super().__init__(f"Validation session {session_id} is already completed")
        self.session_id = session_id


class SessionNotOwned(ValidationFlowError):
    """The session is held by another operator.

    This is a conflict rather than an authorization failure: the caller is a
    valid operator, the session is simply claimed by someone else.
    """

    status_code = 409
    title = "Session Locked"

    def __init__(self, session_id, operator_id: int):
        super().__init__(f"Validation session {session_id} is locked by another operator")
        self.session_id = session_id
        self.operator_id = operator_id


class SubRecordNotFound(ValidationFlowError):
    """An address or phone does not belong to the session's provider."""

    status_code = 404
    title = "Sub-record Not Found"

    def __init__(self, kind: str, record_id):
        super().__init__(f"{kind.capitalize()} {record_id} not found for this provider")
        self.kind = kind
        self.record_id = record_id


class InvalidAttemptNumber(ValidationFlowError):
    """Call attempt number outside {1, 2}."""

    status_code = 400
    title = "Invalid Call Attempt"

    def __init__(self, attempt_number):
        super().__init__(f"Call attempt number must be 1 or 2; got {attempt_number!r}")
        self.attempt_number = attempt_number


class AttemptTooSoon(ValidationFlowError):
    """Second call attempt requested before a business day elapsed."""

    status_code = 422
    title = "Call Attempt Too Soon"

    def __init__(self, first_attempt_at, requested_at):
        super().__init__(
            "Call attempt 2 must be at least 1 business day after attempt 1"
        )
        self.first_attempt_at = first_attempt_at
        self.requested_at = requested_at


class IncompleteValidation(ValidationFlowError):
    """Completion requested while sub-records are still unvalidated."""

    status_code = 422
    title = "Incomplete Validation"

    def __init__(self, unvalidated_addresses: int, unvalidated_phones: int):
        total = unvalidated_addresses + unvalidated_phones
        super().__init__(
            f"All addresses and phones must be validated before completing: "
            f"{total} remaining ({unvalidated_addresses} addresses, {unvalidated_phones} phones)"
        )
        self.unvalidated_addresses = unvalidated_addresses
        self.unvalidated_phones = unvalidated_phones
