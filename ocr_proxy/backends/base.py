"""Base backend interface for document AI operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class DocumentAIResult:
    """Outcome of one upload/sign/OCR/(Q&A) round trip."""
    document_url: str
    model: str
    ocr: Dict[str, Any] = field(default_factory=dict)
    answer: Optional[str] = None
    qa_model: Optional[str] = None


class DocumentAIBackend(ABC):
    """Abstract base class for document AI providers."""

    @abstractmethod
    def process(
        self,
        data: bytes,
        file_name: str,
        include_images: bool = False,
        pages: Optional[List[int]] = None,
        query: Optional[str] = None,
    ) -> DocumentAIResult:
        """
        Run OCR over a document and optionally answer a question about it.

        Args:
            data: Raw PDF bytes
            file_name: Name to upload the document under
            include_images: Whether page images are returned base64-encoded
            pages: 1-based page numbers to process; None means all pages
            query: Optional natural-language question, already trimmed

        Returns:
            DocumentAIResult with the signed document URL, raw OCR output,
            the answer (when a query was given) and the models used

        Raises:
            ConfigurationError: If the backend is not configured
            UpstreamError: If the provider call fails
        """
        pass
