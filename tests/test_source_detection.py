from __future__ import annotations

from backend.services.extrato_import.source_detection import detect_format
from shared.models import ExtractFormat


def test_extension_wins_over_declared_content_type() -> None:
    assert detect_format("extrato.csv", "application/ofx", b"") == ExtractFormat.CSV


def test_ofx_extension_is_case_insensitive() -> None:
    assert detect_format("EXTRATO.OFX", "text/csv", b"") == ExtractFormat.OFX


def test_declared_content_type_used_without_known_extension() -> None:
    assert detect_format("upload", "text/csv; charset=iso-8859-1", b"") == ExtractFormat.CSV
    assert detect_format("upload.txt", "application/x-ofx", b"") == ExtractFormat.OFX


def test_pdf_detected_from_content_type_or_extension() -> None:
    assert detect_format("upload", "application/pdf", b"%PDF-1.7") == ExtractFormat.PDF
    assert detect_format("extrato.pdf", "application/octet-stream", b"%PDF-1.7") == ExtractFormat.PDF


def test_sniffs_ofx_header_after_leading_whitespace() -> None:
    content = b"\r\n  ofxheader:100\r\nDATA:OFXSGML\r\n"
    assert detect_format("download", "application/octet-stream", content) == ExtractFormat.OFX


def test_sniffs_csv_header_with_data_column() -> None:
    content = b"Data,Valor,Identificador,Descricao\n"
    assert detect_format("download", "", content) == ExtractFormat.CSV


def test_docx_is_unsupported() -> None:
    content = b"PK\x03\x04\x14\x00\x06\x00\x08\x00"
    assert (
        detect_format(
            "extrato.docx",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            content,
        )
        == ExtractFormat.UNSUPPORTED
    )
