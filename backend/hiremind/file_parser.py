"""Extract raw text from uploaded resume / job description files. In-memory only."""
import logging
import re
import unicodedata
from io import BytesIO

import pdfplumber
from docx import Document

from .errors import FileParseError

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT = "text/plain"
ALLOWED_TYPES = {PDF, DOCX, TXT}

MAX_TEXT_CHARS = 50000


def clean_text(text: str, max_chars: int = MAX_TEXT_CHARS) -> str:
    """Normalize unicode and collapse runs of blank space."""
    if not text or not text.strip():
        return ""
    t = unicodedata.normalize("NFC", text)
    t = t.replace("\x00", "")
    t = re.sub(r"[ \t]+", " ", t)
    t = re.sub(r"\n\s*\n\s*\n+", "\n\n", t)
    t = t.strip()
    if len(t) > max_chars:
        t = t[:max_chars]
    return t


def _extract_pdf(content: bytes) -> str:
    try:
        with pdfplumber.open(BytesIO(content)) as pdf:
            parts = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.exception("PDF extraction failed")
        raise FileParseError(f"Failed to parse PDF file: {e}") from e
    return "\n\n".join(p for p in parts if p.strip())


def _extract_docx(content: bytes) -> str:
    try:
        doc = Document(BytesIO(content))
    except Exception as e:
        logger.exception("DOCX extraction failed")
        raise FileParseError(f"Failed to parse DOCX file: {e}") from e
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def extract_text(content: bytes, content_type: str) -> str:
    """
    Extract and clean text from an uploaded PDF, DOCX or TXT file.
    Raises FileParseError for unsupported types, unreadable files, or files
    without any text.
    """
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime == PDF:
        raw = _extract_pdf(content)
    elif mime == DOCX:
        raw = _extract_docx(content)
    elif mime == TXT:
        raw = content.decode("utf-8", errors="replace")
    else:
        raise FileParseError("Unsupported file type. Only PDF, DOCX, and TXT files are allowed.")

    text = clean_text(raw)
    if not text:
        raise FileParseError("No text could be extracted from the file.")
    return text
