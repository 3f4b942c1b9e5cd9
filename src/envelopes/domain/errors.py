"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or stored record does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as two inputs that cannot be combined."""


def missing_required_mapping(field: str) -> str:
    """Return message for a required import field without a column."""
    return f"Missing required mapping for: {field}"


def invalid_date(raw: str) -> str:
    """Return message for an unparseable date cell."""
    return f'Invalid date: "{raw}"'


def invalid_amount(raw: str) -> str:
    """Return message for an unparseable amount cell."""
    return f'Invalid amount: "{raw}"'


def missing_account() -> str:
    """Return message for a row without an account name."""
    return "Missing account"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def invalid_month(month: str) -> str:
    """Return message for a month string that is not YYYY-MM."""
    return f"Invalid month '{month}': expected YYYY-MM"


def no_currencies() -> str:
    """Return message when a budget is set before any currency exists."""
    return "No currencies exist yet. Import a CSV first (or set a default currency)."


def upload_too_large(size_chars: int) -> str:
    """Return message for a CSV upload over the local storage threshold."""
    return (
        f"CSV is too large to store locally ({size_chars} chars). "
        "Try a smaller file."
    )


def upload_not_found() -> str:
    """Return message for a missing stored upload."""
    return "CSV upload not found. Please re-attach the file (uploads are stored only on this machine)."


def upload_corrupted() -> str:
    """Return message for an unreadable stored upload."""
    return "CSV upload is corrupted. Please re-attach the file."
