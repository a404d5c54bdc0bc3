from __future__ import annotations

import pytest

from backend.services.extrato_import.errors import ExtratoImportError
from backend.services.extrato_import.parsers.ofx import extract_tag, parse_ofx_extrato
from shared.models import AnomalyPolicy, ImportErrorCategory, MovementCategory, PaymentMethod


SGML_OFX = """OFXHEADER:100
DATA:OFXSGML
VERSION:102
CHARSET:1252

<OFX>
<BANKMSGSRSV1>
<STMTTRNRS>
<STMTRS>
<CURDEF>BRL
<BANKACCTFROM>
<BANKID>0260
<BRANCHID>0001
<ACCTID>1234567-8
<ACCTTYPE>CHECKING
</BANKACCTFROM>
<BANKTRANLIST>
<DTSTART>20240101000000[-3:BRT]
<DTEND>20240131000000[-3:BRT]
<STMTTRN>
<TRNTYPE>DEBIT
<DTPOSTED>20240115120000[-3:BRT]
<TRNAMT>-45.90
<FITID>99887766
<MEMO>BOLETO PAGTO - Fornecedor X
</STMTTRN>
<stmttrn>
<trntype>CREDIT
<dtposted>20240120
<trnamt>1.250,00
<fitid>A1
<memo>Transferência recebida pelo Pix - ***.123.456-** - MARIA   SOUZA
</stmttrn>
</BANKTRANLIST>
</STMTRS>
</STMTTRNRS>
</BANKMSGSRSV1>
</OFX>
"""


def test_parse_ofx_extrato_reads_account_currency_and_transactions() -> None:
    extract = parse_ofx_extrato(SGML_OFX.encode("utf-8"), filename="extrato.ofx")

    assert extract.format == "ofx"
    assert extract.currency == "BRL"
    assert extract.account is not None
    assert extract.account.bank_id == "0260"
    assert extract.account.branch_id == "0001"
    assert extract.account.account_id == "1234567-8"
    assert extract.account.type == "CHECKING"

    first, second = extract.transactions
    assert first.date == "2024-01-15"
    assert first.amount == -45.90
    assert first.movement == MovementCategory.EXPENSE
    assert first.payment_method == PaymentMethod.BANK_SLIP
    assert first.reference == "99887766"
    assert first.counterpart == "Fornecedor X"
    assert first.raw == {
        "posted": "20240115120000[-3:BRT]",
        "amountRaw": "-45.90",
        "memo": "BOLETO PAGTO - Fornecedor X",
        "fitid": "99887766",
        "type": "DEBIT",
    }

    assert second.date == "2024-01-20"
    assert second.amount == 1250.00
    assert second.movement == MovementCategory.INCOME
    assert second.payment_method == PaymentMethod.PIX
    assert second.counterpart == "MARIA SOUZA"


def test_parse_ofx_extrato_minimal_document_without_account() -> None:
    content = (
        b"<OFX><BANKTRANLIST><STMTTRN><DTPOSTED>20240115120000</DTPOSTED><TRNAMT>-45.90</TRNAMT>"
        b"<MEMO>BOLETO PAGTO - Fornecedor X</MEMO><FITID>99887766</FITID></STMTTRN></BANKTRANLIST></OFX>"
    )

    extract = parse_ofx_extrato(content, filename="min.ofx", default_currency="BRL")

    assert extract.account is None
    assert extract.currency == "BRL"
    assert len(extract.transactions) == 1
    transaction = extract.transactions[0]
    assert transaction.date == "2024-01-15"
    assert transaction.amount == -45.90
    assert transaction.movement == MovementCategory.EXPENSE
    assert transaction.payment_method == PaymentMethod.BANK_SLIP
    assert transaction.reference == "99887766"
    assert transaction.raw["type"] is None


def test_parse_ofx_extrato_missing_transaction_list_is_fatal() -> None:
    with pytest.raises(ExtratoImportError) as exc_info:
        parse_ofx_extrato(b"OFXHEADER:100\n<OFX><CURDEF>BRL</OFX>", filename="x.ofx")

    assert exc_info.value.category == ImportErrorCategory.MALFORMED_OFX
    assert "transacoes nao encontradas" in exc_info.value.message


def test_parse_ofx_extrato_empty_transaction_list_is_fatal() -> None:
    content = b"<OFX><BANKTRANLIST><DTSTART>20240101</BANKTRANLIST></OFX>"

    with pytest.raises(ExtratoImportError) as exc_info:
        parse_ofx_extrato(content, filename="x.ofx")

    assert exc_info.value.category == ImportErrorCategory.MALFORMED_OFX
    assert exc_info.value.message == "Nenhuma transacao encontrada no arquivo OFX."


def test_parse_ofx_extrato_defaults_missing_amount_and_skips_bad_date() -> None:
    content = (
        b"<BANKTRANLIST>"
        b"<STMTTRN><DTPOSTED>2024<MEMO>Tarifa</STMTTRN>"
        b"<STMTTRN><DTPOSTED>20240201<MEMO>Ajuste</STMTTRN>"
        b"</BANKTRANLIST>"
    )

    extract = parse_ofx_extrato(content, filename="x.ofx")

    assert len(extract.transactions) == 1
    assert extract.transactions[0].amount == 0.0
    assert extract.transactions[0].movement == MovementCategory.INCOME
    assert extract.transactions[0].raw["amountRaw"] == "0"
    assert extract.skipped[0].line == 1
    assert extract.skipped[0].reason == "data invalida"


def test_parse_ofx_extrato_passthrough_keeps_empty_date() -> None:
    content = b"<BANKTRANLIST><STMTTRN><DTPOSTED>N/A<TRNAMT>10</STMTTRN></BANKTRANLIST>"

    extract = parse_ofx_extrato(content, filename="x.ofx", anomaly_policy=AnomalyPolicy.PASSTHROUGH)

    assert extract.transactions[0].date == ""


def test_parse_ofx_extrato_falls_back_to_cp1252() -> None:
    content = "<BANKTRANLIST><STMTTRN><DTPOSTED>20240301<TRNAMT>-5<MEMO>Débito - Café</STMTTRN></BANKTRANLIST>"

    extract = parse_ofx_extrato(content.encode("cp1252"), filename="x.ofx")

    assert extract.transactions[0].description == "Débito - Café"
    assert extract.transactions[0].payment_method == PaymentMethod.DEBIT_CARD


def test_extract_tag_reads_until_next_tag() -> None:
    assert extract_tag("<acctid> 123-4 \n<ACCTTYPE>SAVINGS", "ACCTID") == "123-4"
    assert extract_tag("<BANKID>1", "BRANCHID") is None
