"""Statement import orchestrator (analyze for review, then build ledger drafts)."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from backend.services.extrato_import.cash_entries import build_cash_entry_drafts
from backend.services.extrato_import.errors import ExtratoImportError
from backend.services.extrato_import.routing import route_extrato_parser
from shared.models import ActivityType, AnomalyPolicy, CashEntryDraft, ExtratoUploadFile, ParsedExtract


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExtratoImportService:
    default_currency: str = "BRL"
    anomaly_policy: AnomalyPolicy = AnomalyPolicy.SKIP

    def analyze(self, upload: ExtratoUploadFile) -> ParsedExtract:
        """Parse one upload into reviewable transactions; nothing is persisted."""

        logger.info(
            "extrato_analyze_started filename=%s content_type=%s size=%s",
            upload.filename,
            upload.content_type,
            len(upload.content),
        )
        try:
            extract = route_extrato_parser(
                upload,
                default_currency=self.default_currency,
                anomaly_policy=self.anomaly_policy,
            )
        except ExtratoImportError as exc:
            logger.warning(
                "extrato_parse_failed filename=%s category=%s message=%s",
                upload.filename,
                exc.category.value,
                exc.message,
            )
            raise

        logger.info(
            "extrato_analyze_completed filename=%s format=%s transactions=%s skipped=%s",
            upload.filename,
            extract.format,
            len(extract.transactions),
            len(extract.skipped),
        )
        return extract

    def build_cash_entries(
        self,
        upload: ExtratoUploadFile,
        *,
        activity_type: ActivityType = ActivityType.SERVICE,
    ) -> tuple[ParsedExtract, list[CashEntryDraft]]:
        extract = self.analyze(upload)
        return extract, build_cash_entry_drafts(extract, activity_type=activity_type)
