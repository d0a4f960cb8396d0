"""Normalizes loosely-typed OCR pages into display-ready pages."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

logger = logging.getLogger(__name__)

HEADING_TYPE_MARKERS = ("title", "header", "heading")


@dataclass
class DisplayPage:
    """A page ready for display: guaranteed page number, clean blocks, markdown."""
    page_number: Union[int, float]
    blocks: List[Dict[str, Any]] = field(default_factory=list)
    markdown: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "blocks": self.blocks,
            "markdown": self.markdown,
        }


def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass but never a page number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _as_page_number(value: Union[int, float]) -> Union[int, float]:
    # Integral floats become int; anything else finite is kept as sent.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def describe_block(block: Dict[str, Any]) -> str:
    """Short human-readable description of a block."""
    if block.get("label") and block.get("value"):
        return f"{block['label']}: {block['value']}"
    if block.get("text"):
        return block["text"]
    return block.get("type") or "Unknown block"


class OcrResultNormalizer:
    """Converts engine pages into DisplayPage objects.

    The engine response is untrusted: every field may be missing or of the
    wrong type. The mapping is total and never raises for such input.
    """

    def normalize(self, pages: Any) -> List[DisplayPage]:
        """
        Normalize a list of OCR pages.

        Args:
            pages: Engine-supplied list of page dicts. Anything that is not a
                   list yields an empty result.

        Returns:
            One DisplayPage per input entry, in input order.
        """
        if not isinstance(pages, list):
            if pages is not None:
                logger.warning(f"Expected a list of pages, got {type(pages).__name__}")
            return []

        display_pages = []
        for position, page in enumerate(pages):
            if not isinstance(page, dict):
                page = {}

            blocks = self._sanitize_blocks(self._get(page, "textBlocks", "text_blocks"))
            markdown = self._resolve_markdown(page.get("markdown"), blocks)

            display_pages.append(DisplayPage(
                page_number=self._resolve_page_number(page, position),
                blocks=blocks,
                markdown=markdown,
            ))

        return display_pages

    def _get(self, page: Dict[str, Any], key: str, fallback_key: str) -> Any:
        if key in page:
            return page[key]
        return page.get(fallback_key)

    def _resolve_page_number(self, page: Dict[str, Any], position: int) -> Union[int, float]:
        """
        Engine page number, then 0-based index + 1, then array position + 1.

        A finite engine value is trusted as-is, so 0, negatives and
        fractional values such as 2.5 pass through unchanged. Only the
        positional fallback guarantees a page number of at least 1.
        """
        page_number = self._get(page, "pageNumber", "page_number")
        if _is_finite_number(page_number):
            return _as_page_number(page_number)

        index = page.get("index")
        if _is_finite_number(index):
            return _as_page_number(index + 1)

        return position + 1

    def _sanitize_blocks(self, blocks: Any) -> List[Dict[str, Any]]:
        """Drop null (and non-dict) entries, keeping order."""
        if not isinstance(blocks, list):
            return []
        return [block for block in blocks if isinstance(block, dict)]

    def _resolve_markdown(self, markdown: Any, blocks: List[Dict[str, Any]]) -> str:
        if isinstance(markdown, str) and markdown.strip():
            return markdown.strip()
        return self._synthesize_markdown(blocks)

    def _synthesize_markdown(self, blocks: List[Dict[str, Any]]) -> str:
        """Build markdown from blocks when the engine supplied none."""
        parts = []
        for block in blocks:
            text = block.get("text")
            if not isinstance(text, str) or not text.strip():
                continue
            text = text.strip()

            block_type = block.get("type")
            if isinstance(block_type, str) and any(
                marker in block_type.lower() for marker in HEADING_TYPE_MARKERS
            ):
                parts.append(f"# {text}")
            elif block.get("label") and block.get("value"):
                parts.append(f"- {describe_block(block)}")
            else:
                parts.append(text)

        return "\n\n".join(parts)


def prepare_display_pages(pages: Any) -> List[DisplayPage]:
    """Shortcut for OcrResultNormalizer().normalize(pages)."""
    return OcrResultNormalizer().normalize(pages)
