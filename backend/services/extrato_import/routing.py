"""Statement parser routing by detected upload format."""

from __future__ import annotations

from backend.services.extrato_import.errors import ExtratoImportError
from backend.services.extrato_import.parsers.csv_extrato import parse_csv_extrato
from backend.services.extrato_import.parsers.ofx import parse_ofx_extrato
from backend.services.extrato_import.source_detection import detect_format
from shared.models import AnomalyPolicy, ExtractFormat, ExtratoUploadFile, ImportErrorCategory, ParsedExtract


def route_extrato_parser(
    upload: ExtratoUploadFile,
    *,
    default_currency: str = "BRL",
    anomaly_policy: AnomalyPolicy = AnomalyPolicy.SKIP,
) -> ParsedExtract:
    extract_format = detect_format(upload.filename, upload.content_type, upload.content)

    if extract_format == ExtractFormat.CSV:
        return parse_csv_extrato(
            upload.content,
            filename=upload.filename,
            default_currency=default_currency,
            anomaly_policy=anomaly_policy,
        )

    if extract_format == ExtractFormat.OFX:
        return parse_ofx_extrato(
            upload.content,
            filename=upload.filename,
            default_currency=default_currency,
            anomaly_policy=anomaly_policy,
        )

    if extract_format == ExtractFormat.PDF:
        raise ExtratoImportError(
            ImportErrorCategory.UNSUPPORTED_FORMAT_PDF,
            "Importacao de PDF ainda nao esta disponivel. Utilize arquivos CSV ou OFX.",
        )

    raise ExtratoImportError(ImportErrorCategory.UNSUPPORTED_FORMAT, "Formato de arquivo nao suportado.")
