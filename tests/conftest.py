"""Shared pytest fixtures for sepadd tests."""

from datetime import date, timedelta
import pytest

from sepadd.domain import validator
from sepadd.domain.codes import LocalInstrument, SequenceType
from sepadd.domain.direct_debit import DirectDebitBatch
from sepadd.domain.transaction import DirectDebitTransaction


class FakeAccountValidator:
    """Accepts every well-formed IBAN/BIC except the ones listed as rejected."""

    def __init__(self, rejected=()):
        self.rejected = set(rejected)
        self.checked = []

    def validate_iban(self, iban):
        self.checked.append(iban)
        return iban not in self.rejected

    def validate_bic(self, bic):
        self.checked.append(bic)
        return validator.bic_identifier(bic) and bic not in self.rejected


@pytest.fixture
def account_validator():
    """Account validator that does not check IBAN checksums."""
    return FakeAccountValidator()


@pytest.fixture
def future_date():
    """A collection date a month from today."""
    return (date.today() + timedelta(days=30)).isoformat()


@pytest.fixture
def batch(account_validator, future_date):
    """A FRST/CORE batch with all required fields set and no transactions."""
    return DirectDebitBatch.create_batch(
        account_validator,
        creditor_identifier="DE00ZZZ00099999999",
        name="Initiator Name",
        iban="DE87200500001234567890",
        bic="BANKDEFFXXX",
        collection_date=future_date,
        sequence_type=SequenceType.FIRST,
        local_instrument=LocalInstrument.CORE,
        message_id="Message-ID",
        payment_id="Payment-ID",
    )


@pytest.fixture
def make_transaction(batch):
    """Factory for transactions of the ``batch`` fixture."""

    def _make(**overrides):
        fields = {
            "end_to_end_id": "OriginatorID1234",
            "mandate_id": "Mandate-Id",
            "mandate_date": "2010-11-20",
            "name": "Debtor Name",
            "iban": "DE21500500009876543210",
            "bic": "SPUEDE2UXXX",
            "amount": "6543.14",
            "message": "Unstructured Remittance Information",
        }
        fields.update(overrides)
        direct_debit = fields.pop("direct_debit", batch)
        return DirectDebitTransaction(direct_debit, **fields)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def sample_csv(tmp_path):
    """Semicolon separated debtor records, one of them amended."""
    csv_path = tmp_path / "debits.csv"
    csv_path.write_text(
        "Mandate-1;2010-11-20;Debtor Name;DE21500500009876543210;SPUEDE2UXXX;6543.14;Membership fee;0\n"
        "Mandate-2;2010-11-20;Other Debtor;DE21500500001234567897;SPUEDE2UXXX;112.72;Membership fee;0;Old-Mandate\n",
        encoding="utf-8",
    )
    return csv_path

