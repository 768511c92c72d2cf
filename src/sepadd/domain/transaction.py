"""Direct debit transaction (one ``DrctDbtTxInf`` line item)."""

import weakref
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from sepadd.domain import direct_debit as _direct_debit
from sepadd.domain import validator
from sepadd.domain.codes import SequenceType, TextMode
from sepadd.domain.errors import (
    FieldValidationError,
    TypeConstraintError,
    invalid_value,
    sequence_type_must_be_first,
    value_too_long,
)
from sepadd.utils.amount_parser import normalize_amount
from sepadd.utils.date_parser import compact_timestamp

NAME_MAX_LENGTH = 70
MESSAGE_MAX_LENGTH = 140


def _remove_spaces(value: str) -> str:
    return value.replace(" ", "")


def _compact_account(value: str) -> str:
    return "".join(value.split()).upper()


class DirectDebitTransaction:
    """A single debit of a debtor's account.

    Every field is validated when it is set. A rejected value raises
    FieldValidationError and leaves the transaction unchanged, so a
    transaction always holds valid data.

    The owning batch is only referenced weakly and only read: its sequence
    type guards ``debitor_bank_changed`` and its creditor identity change
    contributes to the amendment indicator.

    The transaction does not keep its batch alive. Callers must hold on to
    the batch for as long as they use its transactions; once the batch is
    gone, anything that reads it raises TypeConstraintError.
    """

    def __init__(
        self,
        direct_debit: "_direct_debit.DirectDebitBatch",
        end_to_end_id: str,
        mandate_id: str,
        mandate_date: Union[str, date],
        name: str,
        iban: str,
        bic: str,
        amount: Union[str, Decimal],
        message: str,
        currency: str = "EUR",
        original_mandate_id: Optional[str] = None,
        original_debtor_account: Optional[str] = None,
        debitor_bank_changed: bool = False,
        name_mode: TextMode = TextMode.AUTOFIX,
    ):
        """Create and fully validate a transaction.

        Args:
            direct_debit: Owning DirectDebitBatch
            end_to_end_id: Unique reference of the transaction
            mandate_id: Mandate reference
            mandate_date: Date the mandate was signed (YYYY-MM-DD)
            name: Debtor name
            iban: Debtor IBAN
            bic: Debtor BIC
            amount: Instructed amount with two decimals
            message: Unstructured remittance information
            currency: ISO currency code
            original_mandate_id: Previous mandate reference if it changed
            original_debtor_account: Previous IBAN if the debtor changed
                account at the same bank
            debitor_bank_changed: Debtor moved to another bank
            name_mode: How the debtor name is validated

        Raises:
            TypeConstraintError: If direct_debit is not a DirectDebitBatch
            FieldValidationError: If any field is invalid
        """
        if not isinstance(direct_debit, _direct_debit.DirectDebitBatch):
            raise TypeConstraintError("A transaction can only belong to a DirectDebitBatch")
        self._direct_debit = weakref.ref(direct_debit)
        self._original_mandate_id: Optional[str] = None
        self._original_debtor_account: Optional[str] = None
        self._debitor_bank_changed = False

        self.set_end_to_end_id(end_to_end_id)
        self.set_mandate_id(mandate_id)
        self.set_mandate_date(mandate_date)
        self.set_name(name, name_mode)
        self.set_iban(iban)
        self.set_bic(bic)
        self.set_amount(amount)
        self.set_currency(currency)
        self.set_message(message)
        self.set_original_mandate_id(original_mandate_id)
        self.set_original_debtor_account(original_debtor_account)
        self.set_debitor_bank_changed(debitor_bank_changed)

    def __repr__(self) -> str:
        return (
            f"DirectDebitTransaction(end_to_end_id={self._end_to_end_id!r}, "
            f"mandate_id={self._mandate_id!r}, amount={self._amount!r})"
        )

    @property
    def direct_debit(self) -> "_direct_debit.DirectDebitBatch":
        batch = self._direct_debit()
        if batch is None:
            raise TypeConstraintError("The owning DirectDebitBatch no longer exists")
        return batch

    def belongs_to(self, direct_debit: "_direct_debit.DirectDebitBatch") -> bool:
        return self._direct_debit() is direct_debit

    def _attach_to(self, direct_debit: "_direct_debit.DirectDebitBatch") -> None:
        """Move the transaction to another batch.

        Only the batch factory calls this, for transactions handed to a
        batch that did not exist when they were created. The debtor bank
        change is re-checked against the new batch's sequence type.

        Raises:
            TypeConstraintError: If direct_debit is not a DirectDebitBatch
            FieldValidationError: If the debtor bank changed and the new
                batch is not FRST
        """
        if not isinstance(direct_debit, _direct_debit.DirectDebitBatch):
            raise TypeConstraintError("A transaction can only belong to a DirectDebitBatch")
        if self._debitor_bank_changed and direct_debit.sequence_type is not SequenceType.FIRST:
            raise FieldValidationError("sequence_type", sequence_type_must_be_first())
        self._direct_debit = weakref.ref(direct_debit)

    @property
    def end_to_end_id(self) -> str:
        return self._end_to_end_id

    @property
    def amount(self) -> str:
        return self._amount

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def mandate_id(self) -> str:
        return self._mandate_id

    @property
    def mandate_date(self) -> str:
        return self._mandate_date

    @property
    def name(self) -> str:
        return self._name

    @property
    def iban(self) -> str:
        return self._iban

    @property
    def bic(self) -> str:
        return self._bic

    @property
    def message(self) -> str:
        return self._message

    @property
    def original_mandate_id(self) -> Optional[str]:
        return self._original_mandate_id

    @property
    def original_debtor_account(self) -> Optional[str]:
        return self._original_debtor_account

    @property
    def debitor_bank_changed(self) -> bool:
        return self._debitor_bank_changed

    def set_end_to_end_id(self, end_to_end_id: str) -> "DirectDebitTransaction":
        if not validator.restricted_identification_sepa1(end_to_end_id):
            raise FieldValidationError(
                "end_to_end_id", invalid_value("endToEndId", end_to_end_id)
            )
        self._end_to_end_id = end_to_end_id
        return self

    def set_amount(self, amount: Union[str, Decimal]) -> "DirectDebitTransaction":
        amount = normalize_amount(amount)
        if not validator.amount_sepa(amount):
            raise FieldValidationError("amount", invalid_value("amount", amount))
        self._amount = amount
        return self

    def set_currency(self, currency: str) -> "DirectDebitTransaction":
        if isinstance(currency, str):
            currency = _remove_spaces(currency)
        if not validator.active_or_historic_currency_code(currency):
            raise FieldValidationError("currency", invalid_value("currency", currency))
        self._currency = currency
        return self

    def set_mandate_id(self, mandate_id: str) -> "DirectDebitTransaction":
        if isinstance(mandate_id, str):
            mandate_id = _remove_spaces(mandate_id)
        if not validator.restricted_identification_sepa2(mandate_id):
            raise FieldValidationError("mandate_id", invalid_value("mandateId", mandate_id))
        self._mandate_id = mandate_id
        return self

    def set_mandate_date(self, mandate_date: Union[str, date]) -> "DirectDebitTransaction":
        if isinstance(mandate_date, datetime):
            mandate_date = mandate_date.date()
        if isinstance(mandate_date, date):
            mandate_date = mandate_date.isoformat()
        elif isinstance(mandate_date, str):
            mandate_date = _remove_spaces(mandate_date)
        if not validator.iso_date(mandate_date):
            raise FieldValidationError(
                "mandate_date", invalid_value("mandateDate", mandate_date)
            )
        self._mandate_date = mandate_date
        return self

    def set_name(
        self, name: str, text_mode: TextMode = TextMode.STRICT
    ) -> "DirectDebitTransaction":
        if not isinstance(name, str):
            raise FieldValidationError("name", invalid_value("name", name))
        if text_mode is TextMode.AUTOFIX:
            name = validator.convert_text(name)[:NAME_MAX_LENGTH]
        if not validator.max_text(name, NAME_MAX_LENGTH):
            raise FieldValidationError("name", value_too_long("name", NAME_MAX_LENGTH))
        if not validator.text(name):
            raise FieldValidationError("name", invalid_value("name", name))
        self._name = name
        return self

    def set_iban(self, iban: str) -> "DirectDebitTransaction":
        checked = self._checked_iban(iban)
        if checked is None:
            raise FieldValidationError("iban", invalid_value("iban", iban))
        self._iban = checked
        return self

    def set_bic(self, bic: str) -> "DirectDebitTransaction":
        if isinstance(bic, str):
            bic = _compact_account(bic)
        if not (
            validator.bic_identifier(bic)
            and self.direct_debit.account_validator.validate_bic(bic)
        ):
            raise FieldValidationError("bic", invalid_value("bic", bic))
        self._bic = bic
        return self

    def set_message(self, message: str) -> "DirectDebitTransaction":
        if not validator.max_text(message, MESSAGE_MAX_LENGTH):
            raise FieldValidationError(
                "message", value_too_long("message", MESSAGE_MAX_LENGTH)
            )
        if not validator.text(message):
            raise FieldValidationError("message", invalid_value("message", message))
        self._message = message
        return self

    def set_original_mandate_id(
        self, original_mandate_id: Optional[str]
    ) -> "DirectDebitTransaction":
        """Set the mandate reference used before the mandate changed.

        None or an empty value means the mandate reference did not change.
        """
        if isinstance(original_mandate_id, str):
            original_mandate_id = _remove_spaces(original_mandate_id) or None
        if original_mandate_id is not None and not validator.restricted_identification_sepa2(
            original_mandate_id
        ):
            raise FieldValidationError(
                "original_mandate_id",
                invalid_value("orgnlMandateId", original_mandate_id),
            )
        self._original_mandate_id = original_mandate_id
        return self

    def set_original_debtor_account(
        self, original_debtor_account: Optional[str]
    ) -> "DirectDebitTransaction":
        """Set the debtor's previous IBAN at the same bank, None if unchanged."""
        if isinstance(original_debtor_account, str):
            original_debtor_account = _compact_account(original_debtor_account) or None
        if original_debtor_account is not None:
            if self._checked_iban(original_debtor_account) is None:
                raise FieldValidationError(
                    "original_debtor_account",
                    invalid_value("orgnlDbtrAcct", original_debtor_account),
                )
        self._original_debtor_account = original_debtor_account
        return self

    def set_debitor_bank_changed(self, debitor_bank_changed: bool) -> "DirectDebitTransaction":
        """Mark that the debtor moved to another bank.

        A new debtor agent means the next collection is a first one, so this
        is only accepted while the owning batch has sequence type FRST.
        """
        debitor_bank_changed = bool(debitor_bank_changed)
        if debitor_bank_changed and self.direct_debit.sequence_type is not SequenceType.FIRST:
            raise FieldValidationError("sequence_type", sequence_type_must_be_first())
        self._debitor_bank_changed = debitor_bank_changed
        return self

    @property
    def amendment_indicator(self) -> bool:
        """Whether the mandate was amended since the last collection.

        There are four ways a mandate can change:
        1. Mandate reference: the original mandate id is reported
        2. Creditor name or identifier: reported by the owning batch
        3. Debtor account at the same bank: the original IBAN is reported
        4. Debtor bank: the original debtor agent is reported as SMNDA
        """
        return (
            self._original_mandate_id is not None
            or self._original_debtor_account is not None
            or self.direct_debit.is_creditor_identity_changed()
            or self._debitor_bank_changed
        )

    def _checked_iban(self, iban: str) -> Optional[str]:
        if not isinstance(iban, str):
            return None
        iban = _compact_account(iban)
        if not (
            validator.iban2007_identifier(iban)
            and self.direct_debit.account_validator.validate_iban(iban)
        ):
            return None
        return iban

    @staticmethod
    def generate_end_to_end_id(transaction_number: Union[int, str]) -> str:
        """Create an end-to-end id from a running number and the current time.

        Args:
            transaction_number: Running number of the transaction or a mandate id

        Returns:
            Identifier of at most 35 characters
        """
        return f"{transaction_number}-{compact_timestamp()}"[:35]
