"""Record and CSV ingestion of direct debit transactions."""

import csv
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from sepadd.domain.direct_debit import DirectDebitBatch
from sepadd.domain.errors import (
    AggregateValidationError,
    DomainError,
    FieldValidationError,
    IncompleteRecordError,
)
from sepadd.domain.transaction import DirectDebitTransaction

logger = logging.getLogger(__name__)

# mandate id, mandate date, name, iban, bic, amount, message, bank changed flag
MIN_RECORD_FIELDS = 8

DEFAULT_DELIMITER = ";"


def records_to_transactions(
    records: Iterable[Sequence[str]], direct_debit: DirectDebitBatch
) -> list[DirectDebitTransaction]:
    """Build one transaction per record.

    Record layout: mandate id, mandate date, debtor name, IBAN, BIC, amount,
    remittance message, bank changed flag ("1" for true), and optionally the
    original mandate id and the original debtor account.

    Every record is processed even after a failure. The transactions are only
    returned when all records are valid; they are not added to the batch.

    Args:
        records: Records in file order
        direct_debit: Batch that will own the transactions

    Returns:
        Transactions in record order

    Raises:
        AggregateValidationError: If any record is incomplete or invalid
    """
    transactions = []
    errors: list[DomainError] = []
    counter = 0

    for row_num, record in enumerate(records, start=1):
        record = list(record)
        if len(record) < MIN_RECORD_FIELDS:
            errors.append(IncompleteRecordError(row_num, record))
            continue

        counter += 1
        original_mandate_id = record[8] if len(record) > 8 else None
        original_debtor_account = record[9] if len(record) > 9 else None

        try:
            transactions.append(
                DirectDebitTransaction(
                    direct_debit,
                    DirectDebitTransaction.generate_end_to_end_id(counter),
                    mandate_id=record[0],
                    mandate_date=record[1],
                    name=record[2],
                    iban=record[3],
                    bic=record[4],
                    amount=record[5],
                    message=record[6],
                    currency="EUR",
                    original_mandate_id=original_mandate_id,
                    original_debtor_account=original_debtor_account,
                    debitor_bank_changed=record[7].strip() == "1",
                )
            )
        except FieldValidationError as e:
            errors.append(FieldValidationError(e.field, e.message, row=row_num))

    if errors:
        logger.info("Rejected import with %d invalid records", len(errors))
        raise AggregateValidationError(errors)

    logger.debug("Parsed %d transactions", len(transactions))
    return transactions


def read_records(
    csv_file_path: Union[str, Path], delimiter: Optional[str] = None
) -> list[list[str]]:
    """Read the raw records of a CSV file.

    Args:
        csv_file_path: Path to CSV file (no header row)
        delimiter: Field delimiter; detected from the file when None

    Returns:
        Non-empty rows as lists of strings

    Raises:
        FileNotFoundError: If the CSV file doesn't exist
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        if delimiter is None:
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=";,\t|").delimiter
            except csv.Error:
                delimiter = DEFAULT_DELIMITER
        reader = csv.reader(f, delimiter=delimiter)
        return [row for row in reader if any(field.strip() for field in row)]


def import_csv(
    csv_file_path: Union[str, Path],
    direct_debit: DirectDebitBatch,
    delimiter: Optional[str] = None,
) -> list[DirectDebitTransaction]:
    """Read a CSV file and turn its records into transactions of ``direct_debit``."""
    records = read_records(csv_file_path, delimiter)
    logger.debug("Read %d records from %s", len(records), csv_file_path)
    return records_to_transactions(records, direct_debit)
