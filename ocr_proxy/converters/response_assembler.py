"""Assembles backend results into the proxy's JSON response envelope."""

from typing import Any, Dict, Optional

from .page_normalizer import OcrResultNormalizer
from ..backends.base import DocumentAIResult


class ResponseAssembler:
    """Builds the OCR response envelope returned by POST /api/ocr."""

    def __init__(self, normalizer: Optional[OcrResultNormalizer] = None):
        self.normalizer = normalizer or OcrResultNormalizer()

    def assemble(self, result: DocumentAIResult, processing_time_ms: int = 0) -> Dict[str, Any]:
        """
        Assemble the response envelope.

        The raw engine output is passed through under "ocr" untouched;
        "displayPages" carries the normalized view of the same pages.
        Optional keys (answer, qaModel) are omitted when absent.
        """
        ocr = result.ocr if isinstance(result.ocr, dict) else {}
        display_pages = self.normalizer.normalize(ocr.get("pages"))

        envelope: Dict[str, Any] = {
            "documentUrl": result.document_url,
            "ocr": ocr,
            "model": result.model,
            "displayPages": [page.to_dict() for page in display_pages],
            "processingTimeMs": processing_time_ms,
        }

        if result.answer is not None:
            envelope["answer"] = result.answer
        if result.qa_model is not None:
            envelope["qaModel"] = result.qa_model

        return envelope
