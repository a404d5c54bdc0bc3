"""Text and amount normalization helpers shared by the statement parsers."""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Any


_WHITESPACE_REGEX = re.compile(r"\s+")
_OBFUSCATION_REGEX = re.compile(r"[•*]")
_NUMERIC_REGEX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs (newlines and tabs included) into single spaces."""

    return _WHITESPACE_REGEX.sub(" ", value or "").strip()


def strip_obfuscation_marks(value: str) -> str:
    """Remove the masking characters banks use to redact document digits."""

    return _OBFUSCATION_REGEX.sub("", value or "").strip()


def normalize_for_matching(value: str) -> str:
    """Return a lowercase, accent-free version of ``value`` for keyword search."""

    decomposed = unicodedata.normalize("NFD", value or "")
    return "".join(char for char in decomposed if not unicodedata.combining(char)).lower()


def normalize_amount(value: str) -> float:
    """Parse a bank amount written with either decimal convention.

    When both ``,`` and ``.`` appear, whichever comes last is the decimal mark.
    A lone comma is a decimal mark; otherwise ``.`` is. Returns ``nan`` when the
    sanitized text is not a number, so callers must check ``math.isfinite``.
    """

    trimmed = _WHITESPACE_REGEX.sub("", value or "")
    has_comma = "," in trimmed
    has_dot = "." in trimmed

    if has_comma and has_dot:
        if trimmed.rfind(",") > trimmed.rfind("."):
            sanitized = trimmed.replace(".", "").replace(",", ".", 1)
        else:
            sanitized = trimmed.replace(",", "")
    elif has_comma:
        sanitized = trimmed.replace(".", "").replace(",", ".", 1)
    else:
        sanitized = trimmed.replace(",", "")

    if not _NUMERIC_REGEX.match(sanitized):
        return math.nan
    return float(sanitized)


def parse_currency_value(value: Any) -> float:
    """Coerce a ledger amount (number or text) to a finite float, else ``nan``."""

    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        parsed = normalize_amount(value)
    else:
        return math.nan
    return parsed if math.isfinite(parsed) else math.nan
