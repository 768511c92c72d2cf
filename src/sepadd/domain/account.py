"""Bank account validation.

Deep IBAN/BIC checks are delegated to an ``AccountValidator``. The batch and
its transactions only depend on the two-method protocol below, so callers can
plug in a registry-backed implementation. ``ChecksumAccountValidator`` is the
default and performs the offline checks that need no bank directory.
"""

import os
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from sepadd.domain import validator

# IBAN lengths of the SEPA member countries and territories.
SEPA_IBAN_LENGTHS = {
    "AD": 24, "AT": 20, "BE": 16, "BG": 22, "CH": 21, "CY": 28, "CZ": 24,
    "DE": 22, "DK": 18, "EE": 20, "ES": 24, "FI": 18, "FR": 27, "GB": 22,
    "GI": 23, "GR": 27, "HR": 21, "HU": 28, "IE": 22, "IS": 26, "IT": 27,
    "LI": 21, "LT": 20, "LU": 20, "LV": 21, "MC": 27, "MT": 31, "NL": 18,
    "NO": 15, "PL": 28, "PT": 25, "RO": 24, "SE": 24, "SI": 19, "SK": 24,
    "SM": 27, "VA": 22,
}


@runtime_checkable
class AccountValidator(Protocol):
    """Semantic IBAN/BIC checks (checksum, bank existence)."""

    def validate_iban(self, iban: str) -> bool:
        ...

    def validate_bic(self, bic: str) -> bool:
        ...


@dataclass(frozen=True)
class AccountValidationConfig:
    """Settings for the default account validator."""

    verify_iban_checksum: bool = True
    verify_iban_length: bool = True


def iban_checksum_valid(iban: str) -> bool:
    """Return True when the ISO 7064 mod 97-10 check of ``iban`` passes."""
    rearranged = iban[4:] + iban[:4]
    try:
        digits = "".join(str(int(char, 36)) for char in rearranged)
    except ValueError:
        return False
    return int(digits) % 97 == 1


class ChecksumAccountValidator:
    """Offline IBAN/BIC validation."""

    def __init__(self, config: Optional[AccountValidationConfig] = None):
        self.config = config or AccountValidationConfig()

    def validate_iban(self, iban: str) -> bool:
        if not validator.iban2007_identifier(iban):
            return False
        if self.config.verify_iban_length:
            expected = SEPA_IBAN_LENGTHS.get(iban[:2])
            if expected is not None and len(iban) != expected:
                return False
        if self.config.verify_iban_checksum:
            return iban_checksum_valid(iban.upper())
        return True

    def validate_bic(self, bic: str) -> bool:
        return validator.bic_identifier(bic)


def create_account_validator(
    config: Optional[AccountValidationConfig] = None,
) -> ChecksumAccountValidator:
    """Create the default account validator.

    Args:
        config: Validation settings. If None, checksum verification is
            controlled by the SEPADD_SKIP_IBAN_CHECKSUM environment variable.

    Returns:
        ChecksumAccountValidator instance
    """
    if config is None:
        skip_checksum = os.environ.get("SEPADD_SKIP_IBAN_CHECKSUM", "").lower()
        config = AccountValidationConfig(
            verify_iban_checksum=skip_checksum not in {"1", "true", "yes"}
        )
    return ChecksumAccountValidator(config)
