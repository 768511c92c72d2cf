"""Tests for pain.008 XML rendering."""

from datetime import datetime, timedelta, timezone

import pytest
from lxml import etree

from sepadd.domain.direct_debit import DirectDebitBatch
from sepadd.domain.errors import IncompleteBatchError
from sepadd.xml.renderer import PAIN_008_003_02, build_document, render

NS = {"p": PAIN_008_003_02}


def _text(element, path):
    return element.findtext(path, namespaces=NS)


@pytest.fixture
def two_transactions(batch, make_transaction):
    """The reference scenario: one plain and one re-mandated debit."""
    batch.add_transaction(make_transaction())
    batch.add_transaction(
        make_transaction(
            end_to_end_id="OriginatorID1235",
            mandate_id="Other-Mandate-Id",
            name="Other Debtor Name",
            iban="DE21500500001234567897",
            amount="112.72",
            original_mandate_id="Old-Mandate-Id",
        )
    )
    return batch


def test_render_reference_scenario(two_transactions):
    """Control sum and transaction counts in header and payment info."""
    document = etree.fromstring(render(two_transactions))

    assert document.tag == f"{{{PAIN_008_003_02}}}Document"
    assert _text(document, "p:CstmrDrctDbtInitn/p:GrpHdr/p:NbOfTxs") == "2"
    assert _text(document, "p:CstmrDrctDbtInitn/p:PmtInf/p:NbOfTxs") == "2"
    assert _text(document, "p:CstmrDrctDbtInitn/p:PmtInf/p:CtrlSum") == "6655.86"
    assert len(document.findall("p:CstmrDrctDbtInitn/p:GrpHdr", NS)) == 1
    assert len(document.findall("p:CstmrDrctDbtInitn/p:PmtInf", NS)) == 1


def test_render_is_utf8_document_with_schema_location(two_transactions):
    xml_bytes = render(two_transactions)

    assert xml_bytes.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
    document = etree.fromstring(xml_bytes)
    schema_location = document.get("{http://www.w3.org/2001/XMLSchema-instance}schemaLocation")
    assert schema_location == f"{PAIN_008_003_02} pain.008.003.02.xsd"


def test_group_header(two_transactions):
    created_at = datetime(2017, 7, 26, 9, 9, 30, tzinfo=timezone(timedelta(hours=2)))

    header = build_document(two_transactions, created_at).find("p:CstmrDrctDbtInitn/p:GrpHdr", NS)

    assert [child.tag.split("}")[1] for child in header] == ["MsgId", "CreDtTm", "NbOfTxs", "InitgPty"]
    assert _text(header, "p:MsgId") == "Message-ID"
    assert _text(header, "p:CreDtTm") == "2017-07-26T09:09:30+02:00"
    assert _text(header, "p:InitgPty/p:Nm") == "Initiator Name"


def test_default_creation_time_has_offset(two_transactions):
    document = build_document(two_transactions)

    created = _text(document, "p:CstmrDrctDbtInitn/p:GrpHdr/p:CreDtTm")
    assert datetime.fromisoformat(created).utcoffset() is not None


def test_payment_information(two_transactions, future_date):
    payment_info = build_document(two_transactions).find("p:CstmrDrctDbtInitn/p:PmtInf", NS)

    assert _text(payment_info, "p:PmtInfId") == "Payment-ID"
    assert _text(payment_info, "p:PmtMtd") == "DD"
    assert _text(payment_info, "p:PmtTpInf/p:SvcLvl/p:Cd") == "SEPA"
    assert _text(payment_info, "p:PmtTpInf/p:LclInstrm/p:Cd") == "CORE"
    assert _text(payment_info, "p:PmtTpInf/p:SeqTp") == "FRST"
    assert _text(payment_info, "p:ReqdColltnDt") == future_date
    assert _text(payment_info, "p:Cdtr/p:Nm") == "Initiator Name"
    assert _text(payment_info, "p:CdtrAcct/p:Id/p:IBAN") == "DE87200500001234567890"
    assert _text(payment_info, "p:CdtrAgt/p:FinInstnId/p:BIC") == "BANKDEFFXXX"
    assert _text(payment_info, "p:ChrgBr") == "SLEV"
    othr = payment_info.find("p:CdtrSchmeId/p:Id/p:PrvtId/p:Othr", NS)
    assert _text(othr, "p:Id") == "DE00ZZZ00099999999"
    assert _text(othr, "p:SchmeNm/p:Prtry") == "SEPA"

    element_order = [child.tag.split("}")[1] for child in payment_info]
    assert element_order == [
        "PmtInfId",
        "PmtMtd",
        "NbOfTxs",
        "CtrlSum",
        "PmtTpInf",
        "ReqdColltnDt",
        "Cdtr",
        "CdtrAcct",
        "CdtrAgt",
        "ChrgBr",
        "CdtrSchmeId",
        "DrctDbtTxInf",
        "DrctDbtTxInf",
    ]


def test_transaction_elements(two_transactions):
    plain, amended = build_document(two_transactions).findall(".//p:DrctDbtTxInf", NS)

    assert _text(plain, "p:PmtId/p:EndToEndId") == "OriginatorID1234"
    amount = plain.find("p:InstdAmt", NS)
    assert amount.text == "6543.14"
    assert amount.get("Ccy") == "EUR"
    assert _text(plain, "p:DrctDbtTx/p:MndtRltdInf/p:MndtId") == "Mandate-Id"
    assert _text(plain, "p:DrctDbtTx/p:MndtRltdInf/p:DtOfSgntr") == "2010-11-20"
    assert _text(plain, "p:DbtrAgt/p:FinInstnId/p:BIC") == "SPUEDE2UXXX"
    assert _text(plain, "p:Dbtr/p:Nm") == "Debtor Name"
    assert _text(plain, "p:DbtrAcct/p:Id/p:IBAN") == "DE21500500009876543210"
    assert _text(plain, "p:RmtInf/p:Ustrd") == "Unstructured Remittance Information"
    assert [child.tag.split("}")[1] for child in plain] == [
        "PmtId",
        "InstdAmt",
        "DrctDbtTx",
        "DbtrAgt",
        "Dbtr",
        "DbtrAcct",
        "RmtInf",
    ]
    assert _text(amended, "p:InstdAmt") == "112.72"


def test_only_amended_transaction_has_amendment_details(two_transactions):
    """Exactly one AmdmntInfDtls block, holding only OrgnlMndtId."""
    document = build_document(two_transactions)
    plain, amended = document.findall(".//p:DrctDbtTxInf", NS)

    assert len(document.findall(".//p:AmdmntInfDtls", NS)) == 1
    assert plain.find(".//p:AmdmntInd", NS) is None
    assert plain.find(".//p:AmdmntInfDtls", NS) is None

    mandate = amended.find("p:DrctDbtTx/p:MndtRltdInf", NS)
    assert _text(mandate, "p:AmdmntInd") == "true"
    details = mandate.find("p:AmdmntInfDtls", NS)
    assert [child.tag.split("}")[1] for child in details] == ["OrgnlMndtId"]
    assert _text(details, "p:OrgnlMndtId") == "Old-Mandate-Id"


def test_all_amendment_sources(batch, make_transaction):
    """Every change source contributes its own child, in schema order."""
    batch.set_original_creditor_name("Original Creditor Name")
    batch.set_original_creditor_id("AA00ZZZOriginalCreditorID")
    batch.add_transaction(
        make_transaction(
            original_mandate_id="Old-Mandate-Id",
            original_debtor_account="DE21500500001234567897",
            debitor_bank_changed=True,
        )
    )

    details = build_document(batch).find(".//p:AmdmntInfDtls", NS)

    assert [child.tag.split("}")[1] for child in details] == [
        "OrgnlMndtId",
        "OrgnlCdtrSchmeId",
        "OrgnlDbtrAcct",
        "OrgnlDbtrAgt",
    ]
    assert _text(details, "p:OrgnlCdtrSchmeId/p:Nm") == "Original Creditor Name"
    othr = details.find("p:OrgnlCdtrSchmeId/p:Id/p:PrvtId/p:Othr", NS)
    assert _text(othr, "p:Id") == "AA00ZZZOriginalCreditorID"
    assert _text(othr, "p:SchmeNm/p:Prtry") == "SEPA"
    assert _text(details, "p:OrgnlDbtrAcct/p:Id/p:IBAN") == "DE21500500001234567897"
    assert _text(details, "p:OrgnlDbtrAgt/p:FinInstnId/p:Othr/p:Id") == "SMNDA"


def test_creditor_name_change_only(batch, make_transaction):
    """A changed creditor name amends even otherwise plain transactions."""
    batch.set_original_creditor_name("Original Creditor Name")
    batch.add_transaction(make_transaction())

    details = build_document(batch).find(".//p:AmdmntInfDtls", NS)

    creditor_scheme = details.find("p:OrgnlCdtrSchmeId", NS)
    assert [child.tag.split("}")[1] for child in creditor_scheme] == ["Nm"]
    assert details.find("p:OrgnlMndtId", NS) is None
    assert details.find("p:OrgnlDbtrAcct", NS) is None
    assert details.find("p:OrgnlDbtrAgt", NS) is None


def test_creditor_id_change_only(batch, make_transaction):
    batch.set_original_creditor_id("AA00ZZZOriginalCreditorID")
    batch.add_transaction(make_transaction())

    creditor_scheme = build_document(batch).find(".//p:OrgnlCdtrSchmeId", NS)

    assert [child.tag.split("}")[1] for child in creditor_scheme] == ["Id"]


def test_debtor_bank_change_only(batch, make_transaction):
    batch.add_transaction(make_transaction(debitor_bank_changed=True))

    details = build_document(batch).find(".//p:AmdmntInfDtls", NS)

    assert [child.tag.split("}")[1] for child in details] == ["OrgnlDbtrAgt"]


def test_empty_batch_renders(batch):
    document = build_document(batch)

    assert _text(document, "p:CstmrDrctDbtInitn/p:GrpHdr/p:NbOfTxs") == "0"
    assert _text(document, "p:CstmrDrctDbtInitn/p:PmtInf/p:CtrlSum") == "0.00"


def test_incomplete_batch_is_not_rendered(account_validator):
    incomplete = DirectDebitBatch(account_validator).set_message_id("Message-ID")

    with pytest.raises(IncompleteBatchError) as excinfo:
        render(incomplete)

    assert "message_id" not in excinfo.value.missing
    assert "payment_id" in excinfo.value.missing


def test_special_characters_are_escaped(batch, make_transaction):
    batch.set_name("Müller & Söhne")
    batch.add_transaction(make_transaction(message="Beitrag 50% & mehr"))

    document = etree.fromstring(render(batch))

    assert _text(document, ".//p:InitgPty/p:Nm") == "Müller & Söhne"
    assert _text(document, ".//p:RmtInf/p:Ustrd") == "Beitrag 50% & mehr"
