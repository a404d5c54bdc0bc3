"""Pydantic contracts for statement import results and ledger drafts."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExtractFormat(str, Enum):
    """Upload classification produced by format detection."""

    CSV = "csv"
    OFX = "ofx"
    PDF = "pdf"
    UNSUPPORTED = "unsupported"


class ImportErrorCategory(str, Enum):
    """Stable failure categories for statement imports."""

    UNSUPPORTED_FORMAT = "unsupported_format"
    UNSUPPORTED_FORMAT_PDF = "unsupported_format_pdf"
    MALFORMED_CSV = "malformed_csv"
    MALFORMED_OFX = "malformed_ofx"


class PaymentMethod(str, Enum):
    PIX = "PIX"
    CASH = "CASH"
    BANK_SLIP = "BANK_SLIP"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    CHECK = "CHECK"
    OTHER = "OTHER"


class MovementCategory(str, Enum):
    INCOME = "INCOME"
    PURCHASE = "PURCHASE"
    EXPENSE = "EXPENSE"
    WITHDRAWAL = "WITHDRAWAL"


class ActivityType(str, Enum):
    """Ledger activity codes as stored by the cash book."""

    COMMERCE = "COMERCIO"
    INDUSTRY = "INDUSTRIA"
    SERVICE = "SERVICO"
    TRANSPORT = "TRANSPORTE"


class AnomalyPolicy(str, Enum):
    """What to do with a row whose date or amount could not be parsed."""

    SKIP = "skip"
    FAIL = "fail"
    PASSTHROUGH = "passthrough"


class _CamelModel(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class ExtratoUploadFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    filename: str
    content_type: str = ""
    content: bytes


class ParsedAccount(_CamelModel):
    bank_id: str | None = None
    branch_id: str | None = None
    account_id: str | None = None
    type: str | None = None


class ParsedTransaction(_CamelModel):
    date: str
    amount: float
    description: str
    reference: str
    counterpart: str
    product_service: str
    payment_method: PaymentMethod
    movement: MovementCategory
    raw: dict[str, Any] = Field(default_factory=dict)


class SkippedRow(_CamelModel):
    line: int
    reason: str
    raw: dict[str, Any] = Field(default_factory=dict)


class ParsedExtract(_CamelModel):
    filename: str
    format: Literal["csv", "ofx"]
    currency: str | None = None
    account: ParsedAccount | None = None
    transactions: list[ParsedTransaction] = Field(default_factory=list)
    skipped: list[SkippedRow] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-compatible tree sent to the review screen."""

        payload = self.model_dump(mode="json", by_alias=True)
        for key in ("currency", "account"):
            if payload.get(key) is None:
                payload.pop(key, None)
        for transaction in payload["transactions"]:
            amount = transaction.get("amount")
            if isinstance(amount, float) and not math.isfinite(amount):
                transaction["amount"] = None
        return payload


class CashEntryDraft(_CamelModel):
    """Creation payload for one cash-book entry built from a reviewed extract."""

    date: str
    movement: str
    counterpart: str
    product_service: str
    type: ActivityType = ActivityType.SERVICE
    payment_method: str
    amount: str
    notes: str | None = None
