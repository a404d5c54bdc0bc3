"""Composition root for backend services."""

from __future__ import annotations

from backend.services.extrato_import.importer import ExtratoImportService
from shared import config


def build_extrato_import_service() -> ExtratoImportService:
    """Build the statement import service from environment configuration."""

    return ExtratoImportService(
        default_currency=config.extrato_default_currency(),
        anomaly_policy=config.extrato_anomaly_policy(),
    )
