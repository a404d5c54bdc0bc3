"""Service wiring for the statement import backend."""

from backend.factory import build_extrato_import_service


def create_backend_services() -> dict[str, object]:
    """Factory for backend service objects used by API or local integrations."""
    return {"extrato_import_service": build_extrato_import_service()}
