"""Heuristic classification of statement descriptions.

Rules priority for payment method (first hit wins, descriptions often match several):
1) pix
2) boleto
3) credito
4) debito
5) cheque
6) dinheiro / saque
7) other
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from shared.models import MovementCategory, PaymentMethod
from shared.text_utils import normalize_for_matching, normalize_whitespace, strip_obfuscation_marks

NOT_IDENTIFIED = "Nao identificado"
PRODUCT_SERVICE_PLACEHOLDER = "Nao identificado (NI)"

_COUNTERPART_SEPARATOR = " - "
_COUNTERPART_FALLBACK_LENGTH = 80
_MASKED_DOCUMENT_REGEX = re.compile(r"\d{3}\.\d{3}")
_NAME_PUNCTUATION = "'.-"

_PAYMENT_METHOD_RULES: tuple[tuple[tuple[str, ...], PaymentMethod], ...] = (
    (("pix",), PaymentMethod.PIX),
    (("boleto",), PaymentMethod.BANK_SLIP),
    (("credito",), PaymentMethod.CREDIT_CARD),
    (("debito",), PaymentMethod.DEBIT_CARD),
    (("cheque",), PaymentMethod.CHECK),
    (("dinheiro", "saque"), PaymentMethod.CASH),
)


@dataclass(frozen=True, slots=True)
class DescriptionClassification:
    """Fields inferred from one transaction description and amount."""

    counterpart: str
    payment_method: PaymentMethod
    movement: MovementCategory


def _has_letter(value: str) -> bool:
    return any(char.isalpha() for char in value)


def _clean_name(value: str) -> str:
    kept = "".join(
        char
        for char in strip_obfuscation_marks(value)
        if char.isalpha() or char.isspace() or char in _NAME_PUNCTUATION
    )
    # Dropping digits can leave a dangling ". " from masked document prefixes.
    return normalize_whitespace(kept).lstrip(_NAME_PUNCTUATION + " ")


def extract_counterpart(description: str) -> str:
    """Pick the payer/payee name out of a ``" - "`` separated description.

    The first segment after the leading one that has letters and is not a masked
    document number wins; otherwise the second segment. Single-segment descriptions
    fall back to their first 80 characters.
    """

    cleaned = strip_obfuscation_marks(normalize_whitespace(description))
    parts = [part.strip() for part in cleaned.split(_COUNTERPART_SEPARATOR)]
    parts = [part for part in parts if part]

    for index, part in enumerate(parts):
        if index > 0 and _has_letter(part) and not _MASKED_DOCUMENT_REGEX.search(part):
            return _clean_name(part) or NOT_IDENTIFIED

    if len(parts) > 1:
        return _clean_name(parts[1]) or NOT_IDENTIFIED

    return cleaned[:_COUNTERPART_FALLBACK_LENGTH] or NOT_IDENTIFIED


def infer_payment_method(description: str) -> PaymentMethod:
    text = normalize_for_matching(description)
    for keywords, payment_method in _PAYMENT_METHOD_RULES:
        if any(keyword in text for keyword in keywords):
            return payment_method
    return PaymentMethod.OTHER


def infer_movement(amount: float) -> MovementCategory:
    """Sign test only; purchases and withdrawals are reclassified by the user."""

    return MovementCategory.INCOME if amount >= 0 else MovementCategory.EXPENSE


def classify_description(description: str, amount: float) -> DescriptionClassification:
    return DescriptionClassification(
        counterpart=extract_counterpart(description),
        payment_method=infer_payment_method(description),
        movement=infer_movement(amount),
    )
