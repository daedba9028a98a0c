"""Custom exception hierarchy for loan-engine."""


class LoanEngineError(Exception):
    """Base exception for all loan-engine errors."""


class ValidationError(LoanEngineError):
    """Raised when caller-supplied input is rejected."""


class InvalidLoanTermsError(ValidationError):
    """Raised when loan terms cannot produce a schedule.

    The offending field name is kept on ``field`` so callers can map the
    failure back to a form input.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class InvalidPaymentError(ValidationError):
    """Raised when a payment amount cannot be allocated."""


class EntityNotFoundError(LoanEngineError):
    """Raised when a referenced entity does not exist."""


class LoanNotFoundError(EntityNotFoundError):
    """Raised when a loan number is not registered in the ledger."""


class DuplicateIdentifierError(LoanEngineError):
    """Raised when a generated identifier collides with an existing one."""


class InvalidEntityStateError(LoanEngineError):
    """Raised when an entity is in an invalid state for the operation."""


class ConfigurationError(LoanEngineError):
    """Raised when configuration is invalid or missing."""


class SinkError(LoanEngineError):
    """Raised when a sink operation fails."""
