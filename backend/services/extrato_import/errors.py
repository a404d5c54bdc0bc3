"""Failures raised while turning an uploaded statement into transactions."""

from __future__ import annotations

from shared.models import ImportErrorCategory


class ExtratoImportError(ValueError):
    """Raised when an upload cannot be parsed; carries a stable category."""

    def __init__(self, category: ImportErrorCategory, message: str) -> None:
        super().__init__(message)
        self.category = category
        self.message = message

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message, "category": self.category.value}
