"""Client for the OCR proxy: validates input, calls /api/ocr, normalizes pages."""

import base64
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

from .config import get_config
from .converters.page_normalizer import DisplayPage, OcrResultNormalizer
from .utils.file_validation import PDF_MIME_TYPE, validate_file
from .utils.page_filter import parse_page_selection
from .utils.url_resolver import make_resolver

logger = logging.getLogger(__name__)

OCR_PATH = "/api/ocr"


class OcrRequestError(Exception):
    """Raised when a document cannot be submitted or the proxy rejects it."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class AnalysisResult:
    pages: List[DisplayPage] = field(default_factory=list)
    document_url: Optional[str] = None
    answer: Optional[str] = None
    model: Optional[str] = None
    qa_model: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


class OcrProxyClient:
    """Submits PDFs to the proxy the same way the browser front end does."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        hosting_hostname: Optional[str] = None,
        timeout_seconds: float = 120.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if base_url is None:
            base_url = get_config().client.api_base_url
        self._resolve = make_resolver(base_url, hosting_hostname=hosting_hostname)
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._max_size = get_config().upload.max_file_size_bytes
        self.normalizer = OcrResultNormalizer()

    def build_payload(
        self,
        data: bytes,
        file_name: str,
        pages: str = "",
        query: str = "",
        include_images: bool = False,
    ) -> Dict[str, Any]:
        """Build the JSON body for POST /api/ocr; unset options are omitted."""
        payload: Dict[str, Any] = {
            "fileBase64": base64.b64encode(data).decode("ascii"),
            "fileName": file_name,
            "includeImageBase64": include_images,
        }
        parsed_pages = parse_page_selection(pages)
        if parsed_pages is not None:
            payload["pages"] = parsed_pages
        if query.strip():
            payload["query"] = query.strip()
        return payload

    def analyze(
        self,
        document: Union[str, Path, bytes],
        file_name: Optional[str] = None,
        pages: str = "",
        query: str = "",
        include_images: bool = False,
    ) -> AnalysisResult:
        """
        Run OCR (and optionally Q&A) on a PDF through the proxy.

        Args:
            document: Path to a PDF, or its raw bytes
            file_name: Upload name; defaults to the path's name or document.pdf
            pages: Free-text page selection such as "1, 3-5"; blank for all
            query: Optional question about the document
            include_images: Ask for base64 page images in the OCR output

        Raises:
            OcrRequestError: If the file is rejected locally or the proxy
                             returns an error
        """
        if isinstance(document, (str, Path)):
            path = Path(document)
            data = path.read_bytes()
            file_name = file_name or path.name
        else:
            data = document
            file_name = file_name or "document.pdf"

        validation = validate_file(file_name, len(data), PDF_MIME_TYPE, max_size=self._max_size)
        if not validation.is_valid:
            raise OcrRequestError(validation.error)

        payload = self.build_payload(data, file_name, pages, query, include_images)
        url = self._resolve(OCR_PATH)
        logger.info(f"Submitting {file_name!r} to {url}")

        try:
            with httpx.Client(timeout=self._timeout_seconds, transport=self._transport) as client:
                resp = client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise OcrRequestError(f"Failed to reach OCR API: {e}")

        if resp.is_error:
            message = resp.text or "Unexpected error while calling OCR API."
            raise OcrRequestError(message, status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError:
            raise OcrRequestError("OCR API returned invalid JSON.", status_code=resp.status_code)

        if not isinstance(body, dict):
            raise OcrRequestError("OCR API returned an unexpected response.", status_code=resp.status_code)

        ocr = body.get("ocr")
        pages = ocr.get("pages") if isinstance(ocr, dict) else None
        return AnalysisResult(
            pages=self.normalizer.normalize(pages),
            document_url=body.get("documentUrl"),
            answer=body.get("answer"),
            model=body.get("model"),
            qa_model=body.get("qaModel"),
            raw=body,
        )
