"""
PDF Renderer — Lay out a complaint letter as a paginated document.

ReportLab's platypus flows paragraphs into A4 frames and starts new pages
as needed, so long letters paginate without any bookkeeping here.
"""

import io
import logging

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """The document could not be produced."""


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def split_paragraphs(text: str) -> list[str]:
    """Blank-line separated blocks, with single newlines kept as line breaks."""
    blocks = text.replace("\r\n", "\n").split("\n\n")
    paragraphs = []
    for block in blocks:
        lines = [line.rstrip() for line in block.strip("\n").split("\n")]
        if any(line.strip() for line in lines):
            paragraphs.append("<br/>".join(_escape(line) for line in lines))
    return paragraphs


class PdfRenderer:
    """Renders plain text into PDF bytes."""

    media_type = "application/pdf"

    def __init__(self, title: str = "Complaint", font_size: int = 11):
        styles = getSampleStyleSheet()
        self.title = title
        self.body_style = ParagraphStyle(
            "Letter",
            parent=styles["BodyText"],
            fontSize=font_size,
            leading=font_size + 4,
            spaceAfter=8,
        )

    def render(self, text: str) -> bytes:
        buffer = io.BytesIO()
        try:
            doc = SimpleDocTemplate(
                buffer,
                pagesize=A4,
                leftMargin=2.5 * cm,
                rightMargin=2.5 * cm,
                topMargin=2.5 * cm,
                bottomMargin=2.5 * cm,
                title=self.title,
            )
            story = []
            for paragraph in split_paragraphs(text or ""):
                story.append(Paragraph(paragraph, self.body_style))
                story.append(Spacer(1, 0.2 * cm))
            if not story:
                story.append(Spacer(1, 0.2 * cm))
            doc.build(story)
        except Exception as e:
            raise RenderError(f"PDF rendering failed: {e}") from e

        data = buffer.getvalue()
        logger.debug("Rendered PDF (%d bytes)", len(data))
        return data
