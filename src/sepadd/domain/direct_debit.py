"""Direct debit batch (one pain.008 message with one payment information block)."""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from sepadd.domain import transaction as _transaction
from sepadd.domain import validator
from sepadd.domain.account import AccountValidator
from sepadd.domain.codes import LocalInstrument, SequenceType, TextMode
from sepadd.domain.errors import (
    FieldValidationError,
    TypeConstraintError,
    collection_date_not_in_future,
    invalid_value,
    sequence_type_must_be_first,
    value_too_long,
)
from sepadd.utils.amount_parser import sum_amounts
from sepadd.utils.date_parser import is_in_future, parse_iso_date

NAME_MAX_LENGTH = 70

REQUIRED_FIELDS = (
    "message_id",
    "payment_id",
    "name",
    "local_instrument",
    "sequence_type",
    "collection_date",
    "iban",
    "bic",
    "creditor_identifier",
)


def _autofix_text(value: str, max_length: int) -> str:
    return validator.convert_text(value)[:max_length]


class DirectDebitBatch:
    """Message header, payment information and the ordered transactions.

    Mutators validate their single field and either raise
    FieldValidationError without touching the batch or commit the value and
    return the batch, so calls can be chained::

        batch.set_message_id("MSG-1").set_payment_id("PMT-1")
    """

    def __init__(self, account_validator: AccountValidator):
        """Initialize an empty batch.

        Args:
            account_validator: IBAN/BIC checker used for the creditor account
                and for every transaction of this batch
        """
        if not isinstance(account_validator, AccountValidator):
            raise TypeConstraintError("account_validator must implement AccountValidator")
        self.account_validator = account_validator
        self._message_id: Optional[str] = None
        self._payment_id: Optional[str] = None
        self._name: Optional[str] = None
        self._local_instrument: Optional[LocalInstrument] = None
        self._sequence_type: Optional[SequenceType] = None
        self._collection_date: Optional[str] = None
        self._iban: Optional[str] = None
        self._bic: Optional[str] = None
        self._creditor_identifier: Optional[str] = None
        self._original_creditor_name: Optional[str] = None
        self._original_creditor_id: Optional[str] = None
        self._transactions: list["_transaction.DirectDebitTransaction"] = []

    @property
    def message_id(self) -> Optional[str]:
        return self._message_id

    @property
    def payment_id(self) -> Optional[str]:
        return self._payment_id

    @property
    def name(self) -> Optional[str]:
        """Name of the creditor, also used as initiating party."""
        return self._name

    @property
    def local_instrument(self) -> Optional[LocalInstrument]:
        return self._local_instrument

    @property
    def sequence_type(self) -> Optional[SequenceType]:
        return self._sequence_type

    @property
    def collection_date(self) -> Optional[str]:
        return self._collection_date

    @property
    def iban(self) -> Optional[str]:
        return self._iban

    @property
    def bic(self) -> Optional[str]:
        return self._bic

    @property
    def creditor_identifier(self) -> Optional[str]:
        return self._creditor_identifier

    @property
    def original_creditor_name(self) -> Optional[str]:
        return self._original_creditor_name

    @property
    def original_creditor_id(self) -> Optional[str]:
        return self._original_creditor_id

    @property
    def transactions(self) -> tuple["_transaction.DirectDebitTransaction", ...]:
        return tuple(self._transactions)

    def set_message_id(self, message_id: str) -> "DirectDebitBatch":
        if not validator.restricted_identification_sepa1(message_id):
            raise FieldValidationError("message_id", "The message id is not a valid value")
        self._message_id = message_id
        return self

    def set_payment_id(self, payment_id: str) -> "DirectDebitBatch":
        if not validator.restricted_identification_sepa1(payment_id):
            raise FieldValidationError("payment_id", "The payment id is not a valid value")
        self._payment_id = payment_id
        return self

    def set_name(self, name: str, text_mode: TextMode = TextMode.STRICT) -> "DirectDebitBatch":
        """Set the creditor name.

        With TextMode.AUTOFIX disallowed characters are removed and the
        result is cut to 70 characters instead of being rejected. A value
        that is empty after fixing is still rejected.
        """
        if not isinstance(name, str):
            raise FieldValidationError("name", invalid_value("name", name))
        if text_mode is TextMode.AUTOFIX:
            name = _autofix_text(name, NAME_MAX_LENGTH)
        if not validator.max_text(name, NAME_MAX_LENGTH):
            raise FieldValidationError("name", value_too_long("name", NAME_MAX_LENGTH))
        if not validator.text(name):
            raise FieldValidationError("name", "The name is not a valid value")
        self._name = name
        return self

    def set_local_instrument(
        self, local_instrument: Union[str, LocalInstrument] = LocalInstrument.CORE
    ) -> "DirectDebitBatch":
        if not validator.external_local_instrument_1_code(local_instrument):
            raise FieldValidationError(
                "local_instrument", "The code for localInstrument is not valid"
            )
        self._local_instrument = LocalInstrument(local_instrument)
        return self

    def set_sequence_type(self, sequence_type: Union[str, SequenceType]) -> "DirectDebitBatch":
        """Set the sequence type.

        Raises:
            FieldValidationError: If the code is unknown, or if it is not FRST
                while a transaction of this batch has a changed debtor bank
        """
        if not validator.sequence_type_1_code(sequence_type):
            raise FieldValidationError("sequence_type", "The code for sequenceType is not valid")
        sequence_type = SequenceType(sequence_type)
        if sequence_type is not SequenceType.FIRST and any(
            tx.debitor_bank_changed for tx in self._transactions
        ):
            raise FieldValidationError("sequence_type", sequence_type_must_be_first())
        self._sequence_type = sequence_type
        return self

    def set_collection_date(self, collection_date: Union[str, date]) -> "DirectDebitBatch":
        """Set the requested collection date (YYYY-MM-DD, strictly after today)."""
        if isinstance(collection_date, datetime):
            collection_date = collection_date.date()
        if isinstance(collection_date, date):
            collection_date = collection_date.isoformat()
        try:
            day = parse_iso_date(collection_date)
        except ValueError:
            raise FieldValidationError(
                "collection_date", "The value for collectionDate is not valid"
            )
        if not is_in_future(day):
            raise FieldValidationError(
                "collection_date", collection_date_not_in_future(collection_date)
            )
        self._collection_date = collection_date
        return self

    def set_iban(self, iban: str) -> "DirectDebitBatch":
        if not (
            validator.iban2007_identifier(iban)
            and self.account_validator.validate_iban(iban)
        ):
            raise FieldValidationError("iban", "The value for iban is not valid")
        self._iban = iban
        return self

    def set_bic(self, bic: str) -> "DirectDebitBatch":
        if not (validator.bic_identifier(bic) and self.account_validator.validate_bic(bic)):
            raise FieldValidationError("bic", "The value for bic is not valid")
        self._bic = bic
        return self

    def set_creditor_identifier(self, creditor_identifier: str) -> "DirectDebitBatch":
        if not validator.restricted_person_identifier_sepa(creditor_identifier):
            raise FieldValidationError(
                "creditor_identifier", "The value for creditor identifier is not valid"
            )
        self._creditor_identifier = creditor_identifier
        return self

    def set_original_creditor_name(
        self, name: Optional[str], text_mode: TextMode = TextMode.STRICT
    ) -> "DirectDebitBatch":
        """Set the creditor name used before the creditor changed its name.

        None or an empty value clears it. With TextMode.AUTOFIX the name is
        sanitized and truncated; if nothing is left the field is cleared.
        """
        if name is not None and text_mode is TextMode.AUTOFIX:
            name = _autofix_text(str(name), NAME_MAX_LENGTH)
        if not name:
            self._original_creditor_name = None
            return self
        if not validator.max_text(name, NAME_MAX_LENGTH):
            raise FieldValidationError(
                "original_creditor_name", value_too_long("orgnlCdtrSchmeName", NAME_MAX_LENGTH)
            )
        if not validator.text(name):
            raise FieldValidationError(
                "original_creditor_name", "The orgnlCdtrSchmeName is not a valid value"
            )
        self._original_creditor_name = name
        return self

    def set_original_creditor_id(self, creditor_identifier: Optional[str]) -> "DirectDebitBatch":
        """Set the creditor identifier used before it changed; None or empty clears it."""
        if not creditor_identifier:
            self._original_creditor_id = None
            return self
        if not validator.restricted_person_identifier_sepa(creditor_identifier):
            raise FieldValidationError(
                "original_creditor_id", "The value for original creditor identifier is not valid"
            )
        self._original_creditor_id = creditor_identifier
        return self

    def set_transactions(
        self, transactions: Iterable["_transaction.DirectDebitTransaction"]
    ) -> "DirectDebitBatch":
        """Replace all transactions. Nothing changes if any of them is rejected."""
        transactions = list(transactions)
        for tx in transactions:
            self._check_transaction(tx)
        self._transactions = transactions
        return self

    def add_transaction(self, tx: "_transaction.DirectDebitTransaction") -> "DirectDebitBatch":
        """Append a transaction.

        Raises:
            TypeConstraintError: If tx is not a transaction of this batch
            FieldValidationError: If tx has a changed debtor bank and the
                sequence type is not FRST
        """
        self._check_transaction(tx)
        self._transactions.append(tx)
        return self

    def add_transactions(
        self, transactions: Iterable["_transaction.DirectDebitTransaction"]
    ) -> "DirectDebitBatch":
        transactions = list(transactions)
        for tx in transactions:
            self._check_transaction(tx)
        self._transactions.extend(transactions)
        return self

    def _check_transaction(
        self, tx: "_transaction.DirectDebitTransaction", check_owner: bool = True
    ) -> None:
        if not isinstance(tx, _transaction.DirectDebitTransaction):
            raise TypeConstraintError("You can only add transactions")
        if check_owner and not tx.belongs_to(self):
            raise TypeConstraintError("The transaction was created for another DirectDebitBatch")
        if tx.debitor_bank_changed and self._sequence_type is not SequenceType.FIRST:
            raise FieldValidationError("sequence_type", sequence_type_must_be_first())

    def control_sum(self) -> Decimal:
        """Exact sum of all transaction amounts."""
        return sum_amounts(tx.amount for tx in self._transactions)

    def is_creditor_identity_changed(self) -> bool:
        """Whether the creditor's name or identifier changed since the mandate."""
        return self._original_creditor_name is not None or self._original_creditor_id is not None

    def missing_fields(self) -> list[str]:
        """Names of required fields that have not been set yet."""
        return [field for field in REQUIRED_FIELDS if getattr(self, field) is None]

    @classmethod
    def create_batch(
        cls,
        account_validator: AccountValidator,
        creditor_identifier: str,
        name: str,
        iban: str,
        bic: str,
        collection_date: Union[str, date],
        sequence_type: Union[str, SequenceType],
        local_instrument: Union[str, LocalInstrument] = LocalInstrument.CORE,
        original_creditor_name: Optional[str] = None,
        original_creditor_id: Optional[str] = None,
        transactions: Sequence["_transaction.DirectDebitTransaction"] = (),
        message_id: Optional[str] = None,
        payment_id: Optional[str] = None,
    ) -> "DirectDebitBatch":
        """Create a batch with all required fields set.

        Fields are set in a fixed order because later checks depend on
        earlier state, e.g. transactions are checked against the sequence
        type. Names are auto-fixed. Transactions created for another batch
        are moved to the new one. Message and payment id default to the
        current timestamp.

        Raises:
            FieldValidationError: If any value is invalid
            TypeConstraintError: If transactions holds anything else than
                DirectDebitTransaction objects
        """
        batch = cls(account_validator)
        batch.set_creditor_identifier(creditor_identifier)
        batch.set_name(name, TextMode.AUTOFIX)
        batch.set_iban(iban)
        batch.set_bic(bic)
        batch.set_collection_date(collection_date)
        batch.set_sequence_type(sequence_type)
        batch.set_local_instrument(local_instrument)
        batch.set_original_creditor_id(original_creditor_id)
        batch.set_original_creditor_name(original_creditor_name, TextMode.AUTOFIX)
        transactions = list(transactions)
        for tx in transactions:
            batch._check_transaction(tx, check_owner=False)
        for tx in transactions:
            tx._attach_to(batch)
        batch.set_transactions(transactions)

        generated_id = datetime.now().strftime("%Y%m%d%H%M%S%f")[:35]
        batch.set_message_id(message_id if message_id is not None else generated_id)
        batch.set_payment_id(payment_id if payment_id is not None else generated_id)
        return batch


def create_batch(*args, **kwargs) -> DirectDebitBatch:
    """Shortcut for DirectDebitBatch.create_batch."""
    return DirectDebitBatch.create_batch(*args, **kwargs)
