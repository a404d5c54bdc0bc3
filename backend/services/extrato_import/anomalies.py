"""Row-level anomaly handling shared by the CSV and OFX parsers."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field

from backend.services.extrato_import.errors import ExtratoImportError
from shared.models import AnomalyPolicy, ImportErrorCategory, ParsedTransaction, SkippedRow


logger = logging.getLogger(__name__)


_ISO_DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def find_anomaly(transaction: ParsedTransaction) -> str | None:
    """Return why a parsed row is unusable, or ``None`` when it is fine."""

    if not _ISO_DATE_REGEX.match(transaction.date):
        return "data invalida"
    if not math.isfinite(transaction.amount):
        return "valor invalido"
    return None


@dataclass(slots=True)
class TransactionCollector:
    """Accumulates parsed rows in source order and applies the anomaly policy."""

    policy: AnomalyPolicy
    category: ImportErrorCategory
    transactions: list[ParsedTransaction] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    def add(self, transaction: ParsedTransaction, *, line: int) -> None:
        reason = find_anomaly(transaction)
        if reason is None or self.policy == AnomalyPolicy.PASSTHROUGH:
            self.transactions.append(transaction)
            return

        if self.policy == AnomalyPolicy.FAIL:
            raise ExtratoImportError(self.category, f"Linha {line} invalida: {reason}.")

        logger.info("extrato_row_skipped line=%s reason=%s", line, reason)
        self.skipped.append(SkippedRow(line=line, reason=reason, raw=dict(transaction.raw)))

    def ensure_usable(self) -> None:
        """Fail when every row was skipped, so no empty preview is returned."""

        if not self.transactions and self.skipped:
            raise ExtratoImportError(self.category, "Nenhuma transacao valida encontrada no arquivo.")
