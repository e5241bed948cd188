"""Tests for complai/renderer.py"""

import io
from unittest.mock import patch

import pytest
from PyPDF2 import PdfReader

from complai.renderer import PdfRenderer, RenderError, split_paragraphs


class TestSplitParagraphs:
    def test_blank_lines_separate_paragraphs(self):
        assert split_paragraphs("Dear City Hall,\n\nBody.\n\nSincerely") == [
            "Dear City Hall,", "Body.", "Sincerely",
        ]

    def test_single_newlines_become_line_breaks(self):
        assert split_paragraphs("Sincerely,\nResident") == ["Sincerely,<br/>Resident"]

    def test_markup_is_escaped(self):
        assert split_paragraphs("Noise <after> 22h & before 7h") == [
            "Noise &lt;after&gt; 22h &amp; before 7h",
        ]

    def test_whitespace_only_blocks_are_dropped(self):
        assert split_paragraphs("A\n\n   \n\nB") == ["A", "B"]

    def test_windows_newlines(self):
        assert split_paragraphs("A\r\n\r\nB") == ["A", "B"]


class TestPdfRenderer:
    def test_output_starts_with_pdf_magic(self):
        data = PdfRenderer().render("Dear City Hall,\n\nPlease fix the street light.")
        assert data[:4] == b"%PDF"

    def test_short_letter_is_one_page(self):
        data = PdfRenderer().render("Dear City Hall,\n\nShort letter.\n\nSincerely,\nResident")
        assert len(PdfReader(io.BytesIO(data)).pages) == 1

    def test_long_letter_paginates(self):
        text = "\n\n".join(["A paragraph about airport noise at night. " * 10] * 60)
        data = PdfRenderer().render(text)
        assert len(PdfReader(io.BytesIO(data)).pages) > 1

    def test_empty_text_still_renders(self):
        assert PdfRenderer().render("").startswith(b"%PDF")

    def test_text_is_extractable(self):
        data = PdfRenderer().render("Dear Ajuntament,\n\nThe bins are overflowing.")
        page_text = PdfReader(io.BytesIO(data)).pages[0].extract_text()
        assert "bins are overflowing" in page_text

    def test_library_failure_becomes_render_error(self):
        with patch("complai.renderer.SimpleDocTemplate.build", side_effect=RuntimeError("boom")):
            with pytest.raises(RenderError, match="boom"):
                PdfRenderer().render("Dear City Hall")
