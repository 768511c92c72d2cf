"""SEPA direct debit (pain.008.003.02) builder."""

from sepadd.domain import (
    AccountValidationConfig,
    AccountValidator,
    ChecksumAccountValidator,
    DirectDebitBatch,
    DirectDebitTransaction,
    LocalInstrument,
    SequenceType,
    TextMode,
    create_account_validator,
    create_batch,
    records_to_transactions,
)
from sepadd.domain.errors import (
    AggregateValidationError,
    FieldValidationError,
    TypeConstraintError,
)
from sepadd.xml import render

__all__ = [
    "AccountValidationConfig",
    "AccountValidator",
    "ChecksumAccountValidator",
    "DirectDebitBatch",
    "DirectDebitTransaction",
    "LocalInstrument",
    "SequenceType",
    "TextMode",
    "create_account_validator",
    "create_batch",
    "records_to_transactions",
    "AggregateValidationError",
    "FieldValidationError",
    "TypeConstraintError",
    "render",
]


# Import main lazily to avoid circular dependencies
def __getattr__(name):
    if name == "main":
        from sepadd.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
