"""Tolerant OFX (SGML or XML flavoured) statement parser.

OFX 1.x leaves most leaf tags unclosed, so a tag's value is read as everything
between the opening tag and the next ``<``. Tag names are matched case-insensitively.
"""

from __future__ import annotations

import re
from functools import lru_cache

from backend.services.extrato_import.anomalies import TransactionCollector
from backend.services.extrato_import.classification import PRODUCT_SERVICE_PLACEHOLDER, classify_description
from backend.services.extrato_import.errors import ExtratoImportError
from shared.models import AnomalyPolicy, ImportErrorCategory, ParsedAccount, ParsedExtract, ParsedTransaction
from shared.text_utils import normalize_amount, normalize_whitespace


_ACCOUNT_SECTION_REGEX = re.compile(r"<BANKACCTFROM>(.*?)</BANKACCTFROM>", re.IGNORECASE | re.DOTALL)
_TRANSACTIONS_SECTION_REGEX = re.compile(r"<BANKTRANLIST>(.*?)</BANKTRANLIST>", re.IGNORECASE | re.DOTALL)
_STATEMENT_REGEX = re.compile(r"<STMTTRN>(.*?)</STMTTRN>", re.IGNORECASE | re.DOTALL)
_NON_DIGIT_REGEX = re.compile(r"\D")


@lru_cache(maxsize=32)
def _tag_regex(tag: str) -> re.Pattern[str]:
    return re.compile(rf"<{re.escape(tag)}>([^<]+)", re.IGNORECASE)


def extract_tag(text: str, tag: str) -> str | None:
    """Return the stripped value of the first ``<tag>`` in ``text``, if any."""

    match = _tag_regex(tag).search(text)
    return match.group(1).strip() if match else None


def _decode(file_bytes: bytes) -> str:
    try:
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Older exports declare CHARSET:1252 and are not valid UTF-8.
        return file_bytes.decode("cp1252", errors="replace")


def _parse_posted_date(value: str) -> str:
    digits = _NON_DIGIT_REGEX.sub("", value)
    if len(digits) < 8:
        return ""
    return f"{digits[:4]}-{digits[4:6]}-{digits[6:8]}"


def _parse_account(text: str) -> ParsedAccount | None:
    match = _ACCOUNT_SECTION_REGEX.search(text)
    if not match:
        return None
    section = match.group(1)
    return ParsedAccount(
        bank_id=extract_tag(section, "BANKID"),
        branch_id=extract_tag(section, "BRANCHID"),
        account_id=extract_tag(section, "ACCTID"),
        type=extract_tag(section, "ACCTTYPE"),
    )


def _parse_block(block: str) -> ParsedTransaction:
    posted = extract_tag(block, "DTPOSTED") or ""
    amount_raw = extract_tag(block, "TRNAMT")
    if amount_raw is None:
        amount_raw = "0"
    description = normalize_whitespace(extract_tag(block, "MEMO") or "")
    fitid = extract_tag(block, "FITID") or ""

    amount = normalize_amount(amount_raw)
    classification = classify_description(description, amount)
    return ParsedTransaction(
        date=_parse_posted_date(posted),
        amount=amount,
        description=description,
        reference=fitid,
        counterpart=classification.counterpart,
        product_service=PRODUCT_SERVICE_PLACEHOLDER,
        payment_method=classification.payment_method,
        movement=classification.movement,
        raw={
            "posted": posted,
            "amountRaw": amount_raw,
            "memo": description,
            "fitid": fitid,
            "type": extract_tag(block, "TRNTYPE"),
        },
    )


def parse_ofx_extrato(
    file_bytes: bytes,
    *,
    filename: str,
    default_currency: str = "BRL",
    anomaly_policy: AnomalyPolicy = AnomalyPolicy.SKIP,
) -> ParsedExtract:
    text = _decode(file_bytes)

    transactions_section = _TRANSACTIONS_SECTION_REGEX.search(text)
    if not transactions_section:
        raise ExtratoImportError(
            ImportErrorCategory.MALFORMED_OFX,
            "Arquivo OFX invalido: transacoes nao encontradas.",
        )

    account = _parse_account(text)
    currency = extract_tag(text, "CURDEF") or default_currency

    blocks = _STATEMENT_REGEX.findall(transactions_section.group(1))
    if not blocks:
        raise ExtratoImportError(ImportErrorCategory.MALFORMED_OFX, "Nenhuma transacao encontrada no arquivo OFX.")

    collector = TransactionCollector(policy=anomaly_policy, category=ImportErrorCategory.MALFORMED_OFX)
    for index, block in enumerate(blocks, start=1):
        collector.add(_parse_block(block), line=index)

    collector.ensure_usable()
    return ParsedExtract(
        filename=filename,
        format="ofx",
        currency=currency,
        account=account,
        transactions=collector.transactions,
        skipped=collector.skipped,
    )
