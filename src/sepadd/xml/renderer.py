"""pain.008.003.02 XML rendering.

The renderer does not validate. It relies on the batch and its transactions
having been built through their validating setters and only checks that no
required batch field was left unset.
"""

import logging
from datetime import datetime
from typing import Optional

from lxml import etree

from sepadd.domain.direct_debit import DirectDebitBatch
from sepadd.domain.errors import IncompleteBatchError
from sepadd.domain.transaction import DirectDebitTransaction
from sepadd.utils.amount_parser import format_amount
from sepadd.utils.date_parser import format_timestamp, local_now

logger = logging.getLogger(__name__)

PAIN_008_003_02 = "urn:iso:std:iso:20022:tech:xsd:pain.008.003.02"
XSI = "http://www.w3.org/2001/XMLSchema-instance"
NSMAP = {None: PAIN_008_003_02, "xsi": XSI}
SCHEMA_LOCATION = f"{PAIN_008_003_02} pain.008.003.02.xsd"

# Same Mandate, New Debtor Agent
SMNDA = "SMNDA"


def _elm(parent: etree._Element, tag: str, text: Optional[str] = None) -> etree._Element:
    elem = etree.SubElement(parent, f"{{{PAIN_008_003_02}}}{tag}")
    if text is not None:
        elem.text = text
    return elem


def _path(parent: etree._Element, *tags: str, text: Optional[str] = None) -> etree._Element:
    """Create a chain of nested elements and put ``text`` on the innermost."""
    for tag in tags:
        parent = _elm(parent, tag)
    if text is not None:
        parent.text = text
    return parent


def _private_scheme_id(parent: etree._Element, identifier: str) -> None:
    othr = _path(parent, "Id", "PrvtId", "Othr")
    _elm(othr, "Id", identifier)
    _path(othr, "SchmeNm", "Prtry", text="SEPA")


def build_document(
    batch: DirectDebitBatch, created_at: Optional[datetime] = None
) -> etree._Element:
    """Map a batch onto the pain.008 element tree.

    Args:
        batch: Fully populated batch
        created_at: Creation timestamp for GrpHdr/CreDtTm, defaults to now

    Returns:
        The ``Document`` root element

    Raises:
        IncompleteBatchError: If a required batch field is unset
    """
    missing = batch.missing_fields()
    if missing:
        raise IncompleteBatchError(missing)

    transactions = batch.transactions
    number_of_transactions = str(len(transactions))

    document = etree.Element(f"{{{PAIN_008_003_02}}}Document", nsmap=NSMAP)
    document.set(f"{{{XSI}}}schemaLocation", SCHEMA_LOCATION)
    content = _elm(document, "CstmrDrctDbtInitn")

    header = _elm(content, "GrpHdr")
    _elm(header, "MsgId", batch.message_id)
    _elm(header, "CreDtTm", format_timestamp(created_at or local_now()))
    _elm(header, "NbOfTxs", number_of_transactions)
    _path(header, "InitgPty", "Nm", text=batch.name)

    payment_info = _elm(content, "PmtInf")
    _elm(payment_info, "PmtInfId", batch.payment_id)
    _elm(payment_info, "PmtMtd", "DD")
    _elm(payment_info, "NbOfTxs", number_of_transactions)
    _elm(payment_info, "CtrlSum", format_amount(batch.control_sum()))
    payment_type = _elm(payment_info, "PmtTpInf")
    _path(payment_type, "SvcLvl", "Cd", text="SEPA")
    _path(payment_type, "LclInstrm", "Cd", text=batch.local_instrument.value)
    _elm(payment_type, "SeqTp", batch.sequence_type.value)

    _elm(payment_info, "ReqdColltnDt", batch.collection_date)
    _path(payment_info, "Cdtr", "Nm", text=batch.name)
    _path(payment_info, "CdtrAcct", "Id", "IBAN", text=batch.iban)
    _path(payment_info, "CdtrAgt", "FinInstnId", "BIC", text=batch.bic)
    _elm(payment_info, "ChrgBr", "SLEV")
    _private_scheme_id(_elm(payment_info, "CdtrSchmeId"), batch.creditor_identifier)

    for tx in transactions:
        _add_transaction(payment_info, batch, tx)

    logger.debug(
        "Built pain.008 document %s with %s transactions",
        batch.message_id,
        number_of_transactions,
    )
    return document


def _add_transaction(
    payment_info: etree._Element, batch: DirectDebitBatch, tx: DirectDebitTransaction
) -> None:
    tx_info = _elm(payment_info, "DrctDbtTxInf")
    _path(tx_info, "PmtId", "EndToEndId", text=tx.end_to_end_id)
    _elm(tx_info, "InstdAmt", tx.amount).set("Ccy", tx.currency)

    mandate = _path(tx_info, "DrctDbtTx", "MndtRltdInf")
    _elm(mandate, "MndtId", tx.mandate_id)
    _elm(mandate, "DtOfSgntr", tx.mandate_date)

    if tx.amendment_indicator:
        _elm(mandate, "AmdmntInd", "true")
        _add_amendment_details(_elm(mandate, "AmdmntInfDtls"), batch, tx)

    _path(tx_info, "DbtrAgt", "FinInstnId", "BIC", text=tx.bic)
    _path(tx_info, "Dbtr", "Nm", text=tx.name)
    _path(tx_info, "DbtrAcct", "Id", "IBAN", text=tx.iban)
    _path(tx_info, "RmtInf", "Ustrd", text=tx.message)


def _add_amendment_details(
    details: etree._Element, batch: DirectDebitBatch, tx: DirectDebitTransaction
) -> None:
    # Mandate reference changed
    if tx.original_mandate_id is not None:
        _elm(details, "OrgnlMndtId", tx.original_mandate_id)

    # Creditor name and/or identifier changed
    if batch.is_creditor_identity_changed():
        creditor_scheme = _elm(details, "OrgnlCdtrSchmeId")
        if batch.original_creditor_name is not None:
            _elm(creditor_scheme, "Nm", batch.original_creditor_name)
        if batch.original_creditor_id is not None:
            _private_scheme_id(creditor_scheme, batch.original_creditor_id)

    # Debtor changed account at the same bank
    if tx.original_debtor_account is not None:
        _path(details, "OrgnlDbtrAcct", "Id", "IBAN", text=tx.original_debtor_account)

    # Debtor changed bank, collection must be FRST
    if tx.debitor_bank_changed:
        _path(details, "OrgnlDbtrAgt", "FinInstnId", "Othr", "Id", text=SMNDA)


def render(batch: DirectDebitBatch, created_at: Optional[datetime] = None) -> bytes:
    """Render a batch as a UTF-8 encoded pain.008.003.02 document."""
    document = build_document(batch, created_at)
    xml_bytes = etree.tostring(
        document,
        pretty_print=True,
        xml_declaration=True,
        encoding="UTF-8",
    )
    logger.info("Rendered direct debit %s (%d bytes)", batch.message_id, len(xml_bytes))
    return xml_bytes
