"""FastAPI entrypoint for statement import endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from backend.factory import build_extrato_import_service
from backend.services.extrato_import.errors import ExtratoImportError
from shared import config as _config
from shared.models import ExtratoUploadFile, ImportErrorCategory


logger = logging.getLogger(__name__)


_BAD_REQUEST_CATEGORIES = {ImportErrorCategory.UNSUPPORTED_FORMAT}


class UploadRejected(Exception):
    """Raised when the multipart upload itself is unusable."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _status_code_for(category: ImportErrorCategory) -> int:
    return 400 if category in _BAD_REQUEST_CATEGORIES else 422


async def _read_upload(file: UploadFile | None) -> ExtratoUploadFile:
    if file is None:
        raise UploadRejected(400, "Campo 'file' e obrigatorio.")

    max_bytes = _config.extrato_max_upload_bytes()
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise UploadRejected(413, "Arquivo excede o tamanho maximo permitido.")

    return ExtratoUploadFile(
        filename=file.filename or "upload",
        content_type=file.content_type or "",
        content=content,
    )


app = FastAPI(title="Livro Caixa Extrato API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(UploadRejected)
async def handle_upload_rejected(request: Request, exc: UploadRejected) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(ExtratoImportError)
async def handle_extrato_import_error(request: Request, exc: ExtratoImportError) -> JSONResponse:
    """Map parse failures to 400 (unknown format) or 422 (unprocessable content)."""

    return JSONResponse(status_code=_status_code_for(exc.category), content=exc.to_payload())


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Falha ao processar o arquivo. Verifique o formato e tente novamente."},
    )


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.post("/api/importar-extrato")
async def importar_extrato(file: UploadFile | None = File(default=None)) -> Any:
    """Parse an uploaded CSV/OFX statement and return transactions for review."""

    upload = await _read_upload(file)
    extract = build_extrato_import_service().analyze(upload)
    return JSONResponse(content=extract.to_payload())


@app.post("/api/importar-extrato/lancamentos")
async def importar_extrato_lancamentos(file: UploadFile | None = File(default=None)) -> Any:
    """Parse an upload and return the cash-book entry payloads it would create."""

    upload = await _read_upload(file)
    extract, drafts = build_extrato_import_service().build_cash_entries(upload)
    return JSONResponse(
        content={
            "filename": extract.filename,
            "entries": [draft.model_dump(mode="json", by_alias=True, exclude_none=True) for draft in drafts],
            "skipped": len(extract.transactions) - len(drafts) + len(extract.skipped),
        }
    )
