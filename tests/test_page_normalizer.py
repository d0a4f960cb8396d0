"""Tests for OCR page normalization."""

import math

import pytest
from ocr_proxy.converters.page_normalizer import (
    DisplayPage,
    OcrResultNormalizer,
    describe_block,
    prepare_display_pages,
)


class TestOcrResultNormalizer:
    """Tests for OcrResultNormalizer."""

    def setup_method(self):
        self.normalizer = OcrResultNormalizer()

    def test_non_list_input(self):
        assert self.normalizer.normalize(None) == []
        assert self.normalizer.normalize("not an array") == []
        assert self.normalizer.normalize({"pages": []}) == []

    def test_markdown_only_page(self):
        """Falls back to markdown when no structured blocks exist."""
        pages = self.normalizer.normalize([{"index": 0, "markdown": "Summary paragraph."}])

        assert len(pages) == 1
        assert pages[0].page_number == 1
        assert pages[0].blocks == []
        assert pages[0].markdown == "Summary paragraph."

    def test_null_blocks_removed_and_title_synthesized(self):
        pages = self.normalizer.normalize([
            {"pageNumber": 5, "textBlocks": [None, {"type": "title", "text": "Hi"}]},
        ])

        assert pages[0].page_number == 5
        assert pages[0].blocks == [{"type": "title", "text": "Hi"}]
        assert pages[0].markdown == "# Hi"

    def test_page_number_priority(self):
        pages = self.normalizer.normalize([
            {"pageNumber": 7, "index": 2},
            {"index": 4},
            {},
            {"pageNumber": "3", "index": None},
        ])
        assert [p.page_number for p in pages] == [7, 5, 3, 4]

    def test_non_finite_page_numbers_fall_back(self):
        pages = self.normalizer.normalize([
            {"pageNumber": math.nan, "index": math.inf},
            {"pageNumber": True},
        ])
        assert [p.page_number for p in pages] == [1, 2]

    def test_integral_float_page_number(self):
        pages = self.normalizer.normalize([{"pageNumber": 2.0}])
        assert pages[0].page_number == 2
        assert isinstance(pages[0].page_number, int)

    def test_engine_page_number_passed_through(self):
        """Finite engine values are not clamped or rounded."""
        pages = self.normalizer.normalize([
            {"pageNumber": 2.5},
            {"pageNumber": 0},
            {"pageNumber": -3, "index": 4},
        ])
        assert [p.page_number for p in pages] == [2.5, 0, -3]

    def test_order_and_duplicates_preserved(self):
        pages = self.normalizer.normalize([
            {"pageNumber": 3},
            {"pageNumber": 1},
            {"pageNumber": 3},
        ])
        assert [p.page_number for p in pages] == [3, 1, 3]

    def test_markdown_is_trimmed(self):
        pages = self.normalizer.normalize([{"markdown": "\n  # Heading\n\nBody  \n"}])
        assert pages[0].markdown == "# Heading\n\nBody"

    def test_engine_markdown_wins_over_blocks(self):
        pages = self.normalizer.normalize([
            {"markdown": "engine", "textBlocks": [{"type": "paragraph", "text": "block"}]},
        ])
        assert pages[0].markdown == "engine"
        assert len(pages[0].blocks) == 1

    def test_blank_markdown_uses_blocks(self):
        pages = self.normalizer.normalize([
            {
                "markdown": "   ",
                "textBlocks": [
                    {"type": "Section Header", "text": " Intro "},
                    {"type": "paragraph", "text": "First paragraph."},
                    {"type": "field", "label": "Total", "value": "42", "text": "Total 42"},
                    {"type": "HEADING", "text": "Next"},
                ],
            },
        ])
        assert pages[0].markdown == (
            "# Intro\n\nFirst paragraph.\n\n- Total: 42\n\n# Next"
        )

    def test_blocks_without_text_contribute_nothing(self):
        pages = self.normalizer.normalize([
            {"textBlocks": [
                {"type": "table"},
                {"type": "paragraph", "text": "   "},
                {"label": "Name", "value": "Ada"},
                {"text": "kept"},
            ]},
        ])
        assert pages[0].markdown == "kept"
        assert len(pages[0].blocks) == 4

    def test_empty_page(self):
        pages = self.normalizer.normalize([{"pageNumber": 2}])
        assert pages[0] == DisplayPage(page_number=2, blocks=[], markdown="")

    def test_non_list_blocks(self):
        pages = self.normalizer.normalize([{"textBlocks": "oops"}])
        assert pages[0].blocks == []
        assert pages[0].markdown == ""

    def test_non_dict_page_entries(self):
        pages = self.normalizer.normalize([None, "junk", {"pageNumber": 9}])
        assert [p.page_number for p in pages] == [1, 2, 9]
        assert all(p.blocks == [] and p.markdown == "" for p in pages[:2])

    def test_snake_case_keys(self):
        pages = self.normalizer.normalize([
            {"page_number": 4, "text_blocks": [{"text": "snake"}]},
        ])
        assert pages[0].page_number == 4
        assert pages[0].markdown == "snake"

    def test_renormalizing_minimal_output(self):
        first = self.normalizer.normalize([
            {"pageNumber": 5, "textBlocks": [{"type": "title", "text": "Hi"}]},
        ])
        again = self.normalizer.normalize([{"pageNumber": first[0].page_number}])
        assert again == [DisplayPage(page_number=5, blocks=[], markdown="")]

    def test_deterministic(self):
        raw = [{"index": 1, "textBlocks": [{"type": "title", "text": "A"}, None]}]
        assert self.normalizer.normalize(raw) == self.normalizer.normalize(raw)

    def test_to_dict(self):
        page = DisplayPage(page_number=1, blocks=[{"text": "a"}], markdown="a")
        assert page.to_dict() == {"pageNumber": 1, "blocks": [{"text": "a"}], "markdown": "a"}

    def test_prepare_display_pages_shortcut(self):
        assert prepare_display_pages([{"index": 0}]) == [DisplayPage(page_number=1)]


class TestDescribeBlock:
    """Tests for describe_block."""

    def test_label_value(self):
        assert describe_block({"label": "Name", "value": "Ada", "text": "x"}) == "Name: Ada"

    def test_text(self):
        assert describe_block({"type": "paragraph", "text": "Hello"}) == "Hello"

    def test_type_only(self):
        assert describe_block({"type": "table"}) == "table"

    def test_unknown(self):
        assert describe_block({}) == "Unknown block"
        assert describe_block({"label": "Only label"}) == "Unknown block"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
