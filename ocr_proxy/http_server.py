"""HTTP proxy between callers and the Mistral document AI API, using FastAPI."""

import asyncio
import base64
import binascii
import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from .backends.base import DocumentAIBackend
from .backends.document_inspection import DocumentInspector
from .backends.mistral import MistralBackend
from .config import get_config
from .converters.response_assembler import ResponseAssembler
from .errors import DocumentAIError, from_document_ai_error, to_http_error

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"
DEFAULT_FILE_NAME = "document.pdf"


# Pydantic models
class OcrRequest(BaseModel):
    """Request body for POST /api/ocr."""
    model_config = ConfigDict(populate_by_name=True)

    file_base64: Optional[str] = Field(None, alias="fileBase64", description="Base64-encoded PDF data")
    file_name: Optional[str] = Field(None, alias="fileName")
    include_image_base64: bool = Field(False, alias="includeImageBase64")
    pages: Optional[List[PositiveInt]] = Field(None, description="1-based pages; omit for all pages")
    query: Optional[str] = Field(None, description="Optional question about the document")


class HealthResponse(BaseModel):
    """Response body for GET /health."""
    status: str = "ok"
    version: str = VERSION
    models: Dict[str, str]


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Trim a string, returning None when nothing is left."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def create_app(backend: Optional[DocumentAIBackend] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Mistral OCR Proxy",
        description="Validates PDF uploads and forwards them to Mistral OCR and document Q&A",
        version=VERSION,
    )

    backend = backend or MistralBackend()
    inspector = DocumentInspector()
    assembler = ResponseAssembler()

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        config = get_config()
        return HealthResponse(
            status="ok",
            version=VERSION,
            models={"ocr": config.mistral.ocr_model, "qa": config.mistral.qa_model},
        )

    @app.get("/ready")
    async def readiness_check():
        return {"status": "ready"}

    @app.post("/api/ocr")
    async def process_ocr(request: OcrRequest) -> Dict[str, Any]:
        """Run OCR (and optional Q&A) over a base64-encoded PDF."""
        start_time = time.time()

        if not normalize_text(request.file_base64):
            raise to_http_error("MISSING_FILE", "fileBase64 is required.")

        # MIME-style base64 may be wrapped across lines
        encoded = "".join(request.file_base64.split())
        try:
            document_data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise to_http_error("INVALID_BASE64", f"fileBase64 is not valid base64: {e}")

        # fileName is only a label; the content itself is checked below
        file_name = normalize_text(request.file_name) or DEFAULT_FILE_NAME
        max_bytes = get_config().upload.max_file_size_bytes
        if len(document_data) > max_bytes:
            raise to_http_error(
                "FILE_TOO_LARGE",
                f"File too large. Maximum size is {max_bytes / (1024 * 1024):.1f}MB.",
                status_code=413,
                details={"max_bytes": max_bytes, "size": len(document_data)},
            )

        try:
            info = await asyncio.to_thread(inspector.inspect, document_data)
        except ValueError as e:
            raise to_http_error("INVALID_PDF", str(e))

        pages = sorted(set(request.pages)) if request.pages else None
        out_of_range = inspector.pages_out_of_range(info, pages)
        if out_of_range:
            raise to_http_error(
                "PAGE_OUT_OF_RANGE",
                f"Document has {info.page_count} pages",
                details={"page_count": info.page_count, "invalid_pages": out_of_range},
            )

        query = normalize_text(request.query)
        logger.info(
            f"OCR request: file={file_name!r}, size={len(document_data)} bytes, "
            f"pages={pages or 'all'}, query={'yes' if query else 'no'}"
        )

        try:
            result = await asyncio.to_thread(
                backend.process,
                document_data,
                file_name,
                request.include_image_base64,
                pages,
                query,
            )
        except DocumentAIError as e:
            logger.warning(f"OCR request failed: {e.code}: {e.message}")
            raise from_document_ai_error(e)
        except Exception as e:
            logger.exception(f"OCR processing error: {e}")
            raise to_http_error("PROCESSING_FAILED", str(e) or "Unexpected server error.", status_code=500)

        processing_time_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Completed in {processing_time_ms}ms")
        return assembler.assemble(result, processing_time_ms=processing_time_ms)

    return app


# Create app instance for uvicorn
app = create_app()


def run_server():
    """Run the HTTP server."""
    import uvicorn
    config = get_config()
    logger.info(f"Starting HTTP server on {config.server.host}:{config.server.port}")
    uvicorn.run(
        "ocr_proxy.http_server:app",
        host=config.server.host,
        port=config.server.port,
        log_level="info",
    )


if __name__ == "__main__":
    run_server()
