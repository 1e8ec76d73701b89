"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class StoreError(DomainError):
    """The backing store rejected or failed a query."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def missing_field(field_name: str) -> str:
    """Return message for a required transaction field left empty."""
    return f"Field '{field_name}' is required"


def unknown_fields(names: list[str]) -> str:
    """Return message for update fields the store does not know."""
    return f"Unknown transaction field{'s' if len(names) != 1 else ''}: {', '.join(sorted(names))}"


def invalid_choice(field_name: str, value: object, choices: list[str]) -> str:
    """Return message for a value outside an enumerated set."""
    return f"Invalid {field_name} '{value}'. Must be one of: {', '.join(choices)}"
