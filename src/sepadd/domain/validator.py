"""SEPA rulebook grammars.

Every function here is a pure predicate: it takes a raw value and returns
``True`` when the value conforms to the named ISO 20022 / SEPA data type.
None of them raise; values that are not strings simply fail.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any

from sepadd.domain.codes import (
    ChargeBearer,
    LocalInstrument,
    SequenceType,
    TransactionGroupStatus,
    code_values,
)
from sepadd.utils.date_parser import parse_iso_date

# Allowed characters are: A-Za-z0-9':?,- ()+./ plus ÖÄÜöäüß&*$% for text.
_SEPA2_CHARS = r"A-Za-z0-9+?/\-:().,'"
_SEPA1_CHARS = _SEPA2_CHARS + " "
_TEXT_CHARS = _SEPA1_CHARS + "ÖÄÜöäüß&*$%"

_RESTRICTED_ID_SEPA1 = re.compile(rf"[{_SEPA1_CHARS}]{{1,35}}")
_RESTRICTED_ID_SEPA2 = re.compile(rf"[{_SEPA2_CHARS}]{{1,35}}")
_RESTRICTED_PERSON_ID_SEPA = re.compile(
    rf"[a-zA-Z]{{2}}[0-9]{{2}}[{_SEPA2_CHARS}]{{3}}[{_SEPA2_CHARS}]{{1,28}}"
)
_TEXT = re.compile(rf"[{_TEXT_CHARS}]*")
_NOT_TEXT = re.compile(rf"[^{_TEXT_CHARS}]")

_BIC = re.compile(r"[A-Z]{6}[A-Z2-9][A-NP-Z0-9]([A-Z0-9]{3})?")
_IBAN = re.compile(r"[A-Z]{2}[0-9]{2}[a-zA-Z0-9]{1,30}")
_COUNTRY_CODE = re.compile(r"[A-Z]{2}")
_CURRENCY_CODE = re.compile(r"[A-Z]{3}")
_AMOUNT_SEPA = re.compile(r"\d+\.\d{2}", re.ASCII)
_MAX15_NUMERIC = re.compile(r"[0-9]{1,15}")
_DECIMAL_TIME = re.compile(r"[0-9]{9}")
_ISO_DATE_TIME = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})", re.ASCII
)

_SEQUENCE_TYPES = code_values(SequenceType)
_LOCAL_INSTRUMENTS = code_values(LocalInstrument)
_CHARGE_BEARERS = code_values(ChargeBearer)
_GROUP_STATUSES = code_values(TransactionGroupStatus)


def _matches(pattern: re.Pattern, value: Any) -> bool:
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def _in_code_list(codes: frozenset[str], value: Any) -> bool:
    if isinstance(value, Enum):
        value = value.value
    return isinstance(value, str) and value in codes


def restricted_identification_sepa1(value: Any) -> bool:
    """Identifier of 1-35 characters from the SEPA charset, space allowed."""
    return _matches(_RESTRICTED_ID_SEPA1, value)


def restricted_identification_sepa2(value: Any) -> bool:
    """Identifier of 1-35 characters from the SEPA charset without space."""
    return _matches(_RESTRICTED_ID_SEPA2, value)


def restricted_person_identifier_sepa(value: Any) -> bool:
    """Creditor identifier.

    Country code, two check digits, a three character creditor business
    code and a national identifier of up to 28 characters.
    """
    return _matches(_RESTRICTED_PERSON_ID_SEPA, value)


def text(value: Any) -> bool:
    """Free text restricted to the SEPA charset. Length is not checked."""
    return _matches(_TEXT, value)


def max_text(value: Any, max_length: int) -> bool:
    """Text of at least one and at most ``max_length`` characters."""
    return isinstance(value, str) and 0 < len(value) <= max_length


def max35_text(value: Any) -> bool:
    return max_text(value, 35)


def max70_text(value: Any) -> bool:
    return max_text(value, 70)


def max140_text(value: Any) -> bool:
    return max_text(value, 140)


def max1025_text(value: Any) -> bool:
    return max_text(value, 1025)


def max15_numeric_text(value: Any) -> bool:
    return _matches(_MAX15_NUMERIC, value)


def decimal_time(value: Any) -> bool:
    return _matches(_DECIMAL_TIME, value)


def iso_date(value: Any) -> bool:
    """``YYYY-MM-DD`` that is also a real calendar date."""
    try:
        parse_iso_date(value)
    except ValueError:
        return False
    return True


def iso_date_time(value: Any) -> bool:
    """ISO 8601 timestamp with a ``Z`` or ``+HH:MM`` offset."""
    if not _matches(_ISO_DATE_TIME, value):
        return False
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def amount_sepa(value: Any) -> bool:
    """Non-negative amount with exactly two decimals, e.g. ``100.50``."""
    return _matches(_AMOUNT_SEPA, value)


def active_or_historic_currency_code(value: Any) -> bool:
    return _matches(_CURRENCY_CODE, value)


def active_or_historic_currency_code_eur(value: Any) -> bool:
    return value == "EUR"


def country_code(value: Any) -> bool:
    return _matches(_COUNTRY_CODE, value)


def bic_identifier(value: Any) -> bool:
    """Eight or eleven character BIC."""
    return _matches(_BIC, value)


def any_bic_identifier(value: Any) -> bool:
    return bic_identifier(value)


def iban2007_identifier(value: Any) -> bool:
    """IBAN shape only; checksum and registry checks belong to AccountValidator."""
    return _matches(_IBAN, value)


def sequence_type_1_code(value: Any) -> bool:
    return _in_code_list(_SEQUENCE_TYPES, value)


def external_local_instrument_1_code(value: Any) -> bool:
    return _in_code_list(_LOCAL_INSTRUMENTS, value)


def charge_bearer_type_sepa_code(value: Any) -> bool:
    return _in_code_list(_CHARGE_BEARERS, value)


def transaction_group_status_1_code_sepa(value: Any) -> bool:
    return _in_code_list(_GROUP_STATUSES, value)


def convert_text(value: str) -> str:
    """Strip every character that is not allowed in SEPA text."""
    return _NOT_TEXT.sub("", value)
