import io
import re

import pdfplumber

_BLANK_LINES_RE = re.compile(r"\n{3,}")


def extract_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF file."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return clean_text("\n".join(pages))


def clean_text(text: str) -> str:
    """Normalize line endings and collapse runs of blank lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip() for line in text.split("\n")]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


def is_pdf(filename: str | None, content: bytes) -> bool:
    """Accept only .pdf names whose bytes carry the PDF magic header."""
    if not filename or not filename.lower().endswith(".pdf"):
        return False
    return content.startswith(b"%PDF")
