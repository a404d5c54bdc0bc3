"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv

from shared.models import AnomalyPolicy


logger = logging.getLogger(__name__)


_DEFAULT_CURRENCY = "BRL"
_DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in {"dev", "local"}:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def extrato_default_currency() -> str:
    """Return the currency assumed when a statement does not declare one."""
    raw_value = (get_env("EXTRATO_DEFAULT_CURRENCY", "") or "").strip().upper()
    return raw_value or _DEFAULT_CURRENCY


def extrato_max_upload_bytes() -> int:
    """Return the upload size limit, falling back to the default on invalid values."""
    raw_value = (get_env("EXTRATO_MAX_UPLOAD_BYTES", "") or "").strip()
    if not raw_value:
        return _DEFAULT_MAX_UPLOAD_BYTES
    try:
        parsed = int(raw_value)
    except ValueError:
        return _DEFAULT_MAX_UPLOAD_BYTES
    return parsed if parsed > 0 else _DEFAULT_MAX_UPLOAD_BYTES


def extrato_anomaly_policy() -> AnomalyPolicy:
    """Return how rows with an unparseable date or amount are handled."""
    raw_value = (get_env("EXTRATO_ANOMALY_POLICY", "") or "").strip().lower()
    if not raw_value:
        return AnomalyPolicy.SKIP
    try:
        return AnomalyPolicy(raw_value)
    except ValueError:
        logger.warning("extrato_anomaly_policy_invalid value=%s; using skip", raw_value)
        return AnomalyPolicy.SKIP
