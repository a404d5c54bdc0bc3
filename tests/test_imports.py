from backend.main import create_backend_services
from backend.services.extrato_import.importer import ExtratoImportService
from shared.models import ParsedAccount


def test_imports_succeed() -> None:
    services = create_backend_services()

    assert isinstance(services["extrato_import_service"], ExtratoImportService)
    assert ParsedAccount(bankId="341").bank_id == "341"
