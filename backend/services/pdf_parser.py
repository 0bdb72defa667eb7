"""Text extraction from uploaded files into RawDocument, plus bullet helpers."""

import io
import re
from itertools import groupby

import pdfplumber
from docx import Document

from models.schemas.raw_document import LayoutBlock, RawDocument

# Bullet markers: standard + expanded unicode set
BULLET_MARKERS = frozenset("•-–—►▪✓*○◆⚫→▸▹◇■□●◦·")

_NUMBERED_RE = re.compile(r"^\d{1,2}[.)]\s")


def is_bullet_line(line: str) -> bool:
    stripped = line.strip()
    if not stripped:
        return False
    return stripped[0] in BULLET_MARKERS or bool(_NUMBERED_RE.match(stripped))


def strip_bullet(line: str) -> str:
    stripped = line.strip()
    if _NUMBERED_RE.match(stripped):
        return _NUMBERED_RE.sub("", stripped, count=1).strip()
    return stripped.lstrip("".join(BULLET_MARKERS) + " ").strip()


def extract_bullets(text: str) -> list[str]:
    """Extract bullet-point lines from resume text."""
    bullets = []
    for line in text.split("\n"):
        if is_bullet_line(line):
            cleaned = strip_bullet(line)
            if cleaned:
                bullets.append(cleaned)
    return bullets


def extract_document(pdf_bytes: bytes) -> RawDocument:
    """Extract text and line-level layout blocks from a PDF file."""
    pages: list[str] = []
    blocks: list[LayoutBlock] = []
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        for page_number, page in enumerate(pdf.pages, start=1):
            pages.append(page.extract_text() or "")
            words = page.extract_words(extra_attrs=["size"], use_text_flow=True)
            blocks.extend(_words_to_lines(words, page_number))
    return RawDocument(text="\n".join(pages).strip(), layout_blocks=blocks or None)


def _words_to_lines(words: list[dict], page_number: int) -> list[LayoutBlock]:
    """Group pdfplumber words sharing a baseline into one block per line."""
    ordered = sorted(words, key=lambda w: (round(w["top"]), w["x0"]))
    lines = []
    for top, group in groupby(ordered, key=lambda w: round(w["top"])):
        line_words = list(group)
        lines.append(LayoutBlock(
            text=" ".join(w["text"] for w in line_words),
            x=min(w["x0"] for w in line_words),
            y=float(top),
            font_size=max(float(w.get("size", 0.0)) for w in line_words),
            page=page_number,
        ))
    return lines


def extract_document_docx(docx_bytes: bytes) -> RawDocument:
    """Extract paragraph text from a DOCX file."""
    doc = Document(io.BytesIO(docx_bytes))
    return RawDocument(text="\n".join(p.text for p in doc.paragraphs).strip())
