class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRequest(ValidationError):
    """Raised when request parameters are malformed or reference unknown records.

    Always raised before any session is read or written, so nothing is partially applied.
    """


class PersistenceFailure(DomainError):
    """Raised when the data layer fails to read or write sessions."""


class DuplicateSessionError(PersistenceFailure):
    """Raised when an insert hits the unique key on (center, tutor, start, end)."""
