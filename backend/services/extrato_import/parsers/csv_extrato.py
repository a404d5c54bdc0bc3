"""CSV parser for Brazilian bank exports (``data,valor,identificador,descricao``)."""

from __future__ import annotations

import csv
import re

from backend.services.extrato_import.anomalies import TransactionCollector
from backend.services.extrato_import.classification import PRODUCT_SERVICE_PLACEHOLDER, classify_description
from backend.services.extrato_import.errors import ExtratoImportError
from shared.models import AnomalyPolicy, ImportErrorCategory, ParsedExtract, ParsedTransaction
from shared.text_utils import normalize_amount, normalize_whitespace


_LINE_BREAK_REGEX = re.compile(r"\r?\n")
_DATE_REGEX = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
# Bytes windows-1252 leaves unassigned; browsers decode them as their Latin-1 code points.
_CP1252_UNDEFINED_BYTES = frozenset({0x81, 0x8D, 0x8F, 0x90, 0x9D})


def _parse_date(value: str) -> str:
    match = _DATE_REGEX.match(value.strip())
    if not match:
        return ""
    day, month, year = match.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def _decode(file_bytes: bytes) -> str:
    try:
        return file_bytes.decode("cp1252")
    except UnicodeDecodeError:
        return "".join(
            chr(byte) if byte in _CP1252_UNDEFINED_BYTES else bytes([byte]).decode("cp1252")
            for byte in file_bytes
        )


def _split_line(line: str) -> list[str]:
    # One reader per line so an unbalanced quote cannot swallow the following rows.
    return next(csv.reader([line]), [])


def _locate_columns(header: list[str]) -> tuple[int, int, int, int]:
    def _index(name: str) -> int:
        return header.index(name) if name in header else -1

    date_idx = _index("data")
    value_idx = _index("valor")
    id_idx = _index("identificador")
    description_idx = next((idx for idx, name in enumerate(header) if name.startswith("descri")), -1)

    if -1 in (date_idx, value_idx, id_idx, description_idx):
        raise ExtratoImportError(
            ImportErrorCategory.MALFORMED_CSV,
            "Cabecalho do CSV invalido ou fora do padrao esperado.",
        )
    return date_idx, value_idx, id_idx, description_idx


def _cell(columns: list[str], idx: int) -> str:
    return columns[idx].strip() if idx < len(columns) else ""


def parse_csv_extrato(
    file_bytes: bytes,
    *,
    filename: str,
    default_currency: str = "BRL",
    anomaly_policy: AnomalyPolicy = AnomalyPolicy.SKIP,
) -> ParsedExtract:
    # Exports come in windows-1252 (Latin-1 superset); UTF-8 would mangle accented descriptions.
    content = _decode(file_bytes)
    lines = [line.strip() for line in _LINE_BREAK_REGEX.split(content)]
    lines = [line for line in lines if line]

    if len(lines) < 2:
        raise ExtratoImportError(ImportErrorCategory.MALFORMED_CSV, "Arquivo CSV sem conteudo suficiente.")

    rows = [_split_line(line) for line in lines]
    header = [name.strip().lower() for name in rows[0]]
    date_idx, value_idx, id_idx, description_idx = _locate_columns(header)

    collector = TransactionCollector(policy=anomaly_policy, category=ImportErrorCategory.MALFORMED_CSV)
    for index, columns in enumerate(rows[1:]):
        line_number = index + 2
        raw_date = _cell(columns, date_idx)
        amount_raw = _cell(columns, value_idx)
        reference = _cell(columns, id_idx)
        description = normalize_whitespace(_cell(columns, description_idx))

        amount = normalize_amount(amount_raw)
        classification = classify_description(description, amount)
        transaction = ParsedTransaction(
            date=_parse_date(raw_date),
            amount=amount,
            description=description,
            reference=reference,
            counterpart=classification.counterpart,
            product_service=PRODUCT_SERVICE_PLACEHOLDER,
            payment_method=classification.payment_method,
            movement=classification.movement,
            raw={
                "originalLineNumber": line_number,
                "date": raw_date,
                "amountRaw": amount_raw,
                "description": description,
                "reference": reference,
            },
        )
        collector.add(transaction, line=line_number)

    collector.ensure_usable()
    return ParsedExtract(
        filename=filename,
        format="csv",
        currency=default_currency,
        transactions=collector.transactions,
        skipped=collector.skipped,
    )
