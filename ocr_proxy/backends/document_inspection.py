"""PDF inspection using PyMuPDF."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import pymupdf

logger = logging.getLogger(__name__)


@dataclass
class DocumentInfo:
    page_count: int


class DocumentInspector:
    """Opens uploaded bytes locally to check they form a readable PDF."""

    def inspect(self, data: bytes) -> DocumentInfo:
        """
        Read basic facts about a PDF.

        Raises:
            ValueError: If the bytes are not a readable PDF
        """
        try:
            doc = pymupdf.open(stream=data, filetype="pdf")
        except Exception:
            raise ValueError("Invalid or corrupted PDF file")

        try:
            page_count = len(doc)
        finally:
            doc.close()

        if page_count == 0:
            raise ValueError("Invalid or corrupted PDF file")

        logger.debug(f"Inspected PDF: {page_count} pages")
        return DocumentInfo(page_count=page_count)

    def pages_out_of_range(self, info: DocumentInfo, pages: Optional[List[int]]) -> List[int]:
        """Return the requested pages that lie past the last page."""
        if not pages:
            return []
        return [page for page in pages if page > info.page_count]
