"""Closed ISO 20022 code lists used by SEPA direct debits."""

from enum import Enum


class SequenceType(str, Enum):
    """Position of a collection in the lifecycle of a mandate."""

    FIRST = "FRST"
    RECURRING = "RCUR"
    ONE_OFF = "OOFF"
    FINAL = "FNAL"


class LocalInstrument(str, Enum):
    """Direct debit scheme.

    CORE is the basic scheme, COR1 the basic scheme with D-1 agreement and
    B2B the business-to-business scheme.
    """

    CORE = "CORE"
    COR1 = "COR1"
    B2B = "B2B"


class ChargeBearer(str, Enum):
    SLEV = "SLEV"
    SCOR = "SCOR"


class TransactionGroupStatus(str, Enum):
    REJECTED = "RJCT"


class TextMode(Enum):
    """How free text is handled by name setters.

    STRICT rejects any value outside the SEPA text grammar. AUTOFIX strips
    disallowed characters and truncates to the field's maximum length.
    """

    STRICT = "strict"
    AUTOFIX = "autofix"


def code_values(codes: type[Enum]) -> frozenset[str]:
    """Return the wire values of a code list."""
    return frozenset(member.value for member in codes)
