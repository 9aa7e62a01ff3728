class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed (bad date, unknown status or role)."""


class NotFoundError(DomainError):
    """Raised when a referenced class, student or person does not exist."""


class ConflictIgnored(DomainError):
    """Duplicate add attempt treated as a successful no-op.

    Returned as an informational notice, not raised out of service calls.
    """


class StorageUnavailable(DomainError):
    """Raised when the underlying persistence failed. Nothing was written; retry is safe."""


class LedgerInconsistencyError(DomainError):
    """Raised when a write is detected to have only partially happened."""
