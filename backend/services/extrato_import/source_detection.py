"""Upload format detection from filename, declared content type and leading bytes."""

from __future__ import annotations

import logging

from shared.models import ExtractFormat


logger = logging.getLogger(__name__)


_CSV_EXTENSIONS = {".csv"}
_OFX_EXTENSIONS = {".ofx"}
_SNIFF_BYTES = 32


def _extension(filename: str) -> str:
    idx = filename.rfind(".")
    return "" if idx == -1 else filename[idx:].lower()


def _sniff(content: bytes) -> ExtractFormat:
    snippet = content[:_SNIFF_BYTES].decode("utf-8", errors="replace")
    snippet = snippet.replace("\ufeff", "").lstrip()
    if snippet.upper().startswith("OFXHEADER"):
        return ExtractFormat.OFX
    if "," in snippet and "data" in snippet.lower():
        return ExtractFormat.CSV
    return ExtractFormat.UNSUPPORTED


def detect_format(filename: str, content_type: str | None, content: bytes) -> ExtractFormat:
    """Classify an upload; the first matching rule wins.

    Order: extension, declared content type (``.pdf`` extension included), then a
    sniff of the first bytes for an OFX header or a CSV header naming ``data``.
    """

    extension = _extension(filename or "")
    if extension in _CSV_EXTENSIONS:
        return ExtractFormat.CSV
    if extension in _OFX_EXTENSIONS:
        return ExtractFormat.OFX

    declared = (content_type or "").lower()
    if "csv" in declared:
        return ExtractFormat.CSV
    if "ofx" in declared:
        return ExtractFormat.OFX
    if "pdf" in declared or extension == ".pdf":
        return ExtractFormat.PDF

    detected = _sniff(content)
    logger.debug("extrato_format_sniffed filename=%s format=%s", filename, detected.value)
    return detected
