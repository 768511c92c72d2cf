"""Domain layer for sepadd."""

from sepadd.domain.direct_debit import DirectDebitBatch, create_batch
from sepadd.domain.transaction import DirectDebitTransaction
from sepadd.domain.account import (
    AccountValidationConfig,
    AccountValidator,
    ChecksumAccountValidator,
    create_account_validator,
)
from sepadd.domain.codes import LocalInstrument, SequenceType, TextMode
from sepadd.domain.csv_import import import_csv, read_records, records_to_transactions

__all__ = [
    "DirectDebitBatch",
    "DirectDebitTransaction",
    "create_batch",
    "AccountValidationConfig",
    "AccountValidator",
    "ChecksumAccountValidator",
    "create_account_validator",
    "LocalInstrument",
    "SequenceType",
    "TextMode",
    "import_csv",
    "read_records",
    "records_to_transactions",
]
