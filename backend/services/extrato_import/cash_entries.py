"""Conversion of reviewed statement transactions into cash-book entry drafts."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from backend.services.extrato_import.classification import NOT_IDENTIFIED, PRODUCT_SERVICE_PLACEHOLDER
from shared.models import (
    ActivityType,
    CashEntryDraft,
    MovementCategory,
    ParsedExtract,
    ParsedTransaction,
    PaymentMethod,
)
from shared.text_utils import parse_currency_value


LEDGER_MOVEMENT_CODES: dict[MovementCategory, str] = {
    MovementCategory.INCOME: "RECEITA",
    MovementCategory.PURCHASE: "COMPRA",
    MovementCategory.EXPENSE: "DESPESA",
    MovementCategory.WITHDRAWAL: "RETIRADA",
}

LEDGER_PAYMENT_CODES: dict[PaymentMethod, str] = {
    PaymentMethod.PIX: "PIX",
    PaymentMethod.CASH: "DINHEIRO",
    PaymentMethod.BANK_SLIP: "BOLETO",
    PaymentMethod.CREDIT_CARD: "CARTAO_CREDITO",
    PaymentMethod.DEBIT_CARD: "CARTAO_DEBITO",
    PaymentMethod.CHECK: "CHEQUE",
    PaymentMethod.OTHER: "OUTROS",
}


def _format_amount(value: float) -> str:
    return str(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_cash_entry_draft(
    transaction: ParsedTransaction,
    *,
    activity_type: ActivityType = ActivityType.SERVICE,
) -> CashEntryDraft | None:
    """Return the ledger payload for one transaction, or ``None`` when unusable."""

    amount = parse_currency_value(transaction.amount)
    if not transaction.date or not math.isfinite(amount):
        return None

    return CashEntryDraft(
        date=transaction.date,
        movement=LEDGER_MOVEMENT_CODES.get(transaction.movement, "RECEITA"),
        counterpart=transaction.counterpart or NOT_IDENTIFIED,
        product_service=transaction.product_service or PRODUCT_SERVICE_PLACEHOLDER,
        type=activity_type,
        payment_method=LEDGER_PAYMENT_CODES[transaction.payment_method],
        amount=_format_amount(amount),
        notes=transaction.reference or None,
    )


def build_cash_entry_drafts(
    extract: ParsedExtract,
    *,
    activity_type: ActivityType = ActivityType.SERVICE,
) -> list[CashEntryDraft]:
    """Build insert payloads in statement order, leaving out undated or unpriced rows."""

    drafts: list[CashEntryDraft] = []
    for transaction in extract.transactions:
        draft = build_cash_entry_draft(transaction, activity_type=activity_type)
        if draft is not None:
            drafts.append(draft)
    return drafts
