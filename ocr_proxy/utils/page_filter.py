"""Utility functions for page selection and filtering."""

import logging
import re
from typing import List, Optional

logger = logging.getLogger(__name__)

_RANGE_PATTERN = re.compile(r"(\d+)-(\d+)", re.ASCII)
_PAGE_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)


def parse_page_selection(value: str) -> Optional[List[int]]:
    """
    Parse free-text page selection into sorted, unique page numbers.

    Malformed segments are dropped rather than reported, so "1, abc, 3-2"
    still yields [1]. Page numbering is 1-based: an explicit 0 and any
    range starting at 0 are discarded.

    Args:
        value: Page selection string (e.g., "1, 3-5, 8")

    Returns:
        Ascending list of page numbers, or None when no restriction applies
        (empty input or nothing valid survived).
    """
    logger.debug(f"Parsing page selection: {value!r}")
    trimmed = value.strip()
    if not trimmed:
        return None

    pages = set()

    for segment in trimmed.split(','):
        segment = segment.strip()
        if not segment:
            continue

        range_match = _RANGE_PATTERN.fullmatch(segment)
        if range_match:
            start = int(range_match.group(1), 10)
            end = int(range_match.group(2), 10)
            if start == 0 or start > end:
                continue
            pages.update(range(start, end + 1))
            continue

        # Leading integer only: "1.5" reads as page 1, "-5" is dropped.
        page_match = _PAGE_PATTERN.match(segment)
        if page_match:
            page = int(page_match.group(0), 10)
            if page > 0:
                pages.add(page)

    result = sorted(pages) if pages else None
    logger.debug(f"Parsed page selection: {result}")
    return result
