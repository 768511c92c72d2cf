"""Shared domain error messages and error types."""

from typing import Any, Optional, Sequence


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class FieldValidationError(ValidationError):
    """A single field was rejected by its SEPA grammar.

    The offending value is never stored, so the owning object keeps its
    previous state.
    """

    def __init__(self, field: str, message: str, row: Optional[int] = None):
        self.field = field
        self.message = message
        self.row = row
        super().__init__(message if row is None else f"Row {row}: {message}")


class IncompleteRecordError(ValidationError):
    """An ingestion record has too few fields to build a transaction."""

    def __init__(self, row: int, record: Sequence[Any]):
        self.row = row
        self.record = list(record)
        super().__init__(incomplete_record(row, len(self.record)))


class AggregateValidationError(DomainError):
    """Every error collected while ingesting a set of records."""

    def __init__(self, errors: Sequence[DomainError]):
        self.errors = list(errors)
        super().__init__("\n".join(str(error) for error in self.errors))


class IncompleteBatchError(DomainError):
    """A batch was rendered before all required fields were set."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(
            f"Cannot render direct debit: unset required fields: {', '.join(self.missing)}"
        )


class TypeConstraintError(TypeError):
    """An object of the wrong kind was attached to a parent/child relation."""


def invalid_value(field: str, value: Any) -> str:
    """Return message for a value that does not match its grammar."""
    return f"The value '{value}' for {field} is not valid"


def value_too_long(field: str, max_length: int) -> str:
    """Return message for empty or overlong text."""
    return f"The {field} must not be empty or longer than {max_length} characters"


def collection_date_not_in_future(value: str) -> str:
    """Return message for a collection date that is today or in the past."""
    return f"The collectionDate '{value}' needs to be in the future"


def sequence_type_must_be_first() -> str:
    """Return message for a bank change outside a FRST collection."""
    return "For a debitor with changed bank account the sequenceType must be FRST"


def incomplete_record(row: int, field_count: int) -> str:
    """Return message for a record with fewer than the required fields."""
    return (
        f"Row {row}: Line incomplete or wrong delimiter "
        f"({field_count} field{'s' if field_count != 1 else ''}, at least 8 required)"
    )
