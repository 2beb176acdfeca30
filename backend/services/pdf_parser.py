"""Base64 PDF decoding, text extraction and normalization."""

import asyncio
import base64
import io
import logging
import re
from typing import NamedTuple

import pdfplumber

from models.schemas.pdf_metadata import PdfMetadata
from services.errors import ExtractionError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"

# Browsers send FileReader.readAsDataURL output
_DATA_URL_PREFIX_RE = re.compile(r"^data:application/pdf;base64,")
_WHITESPACE_RE = re.compile(r"\s+")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


class RawPdf(NamedTuple):
    text: str
    num_pages: int
    info: dict


def _decode(data: str) -> bytes:
    cleaned = _DATA_URL_PREFIX_RE.sub("", data.strip())
    return base64.b64decode("".join(cleaned.split()), validate=True)


def decoded_size(data: str) -> int:
    """Byte length the base64 payload decodes to, without decoding it."""
    payload = "".join(_DATA_URL_PREFIX_RE.sub("", data.strip()).split())
    return len(payload) * 3 // 4 - payload[-2:].count("=")


def read_pdf(pdf_bytes: bytes) -> RawPdf:
    """Parse PDF bytes with pdfplumber. Raises whatever the parser raises."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
        return RawPdf(
            text="\n".join(pages),
            num_pages=len(pdf.pages),
            info=dict(pdf.metadata or {}),
        )


def clean_text(text: str) -> str:
    """Normalize extracted text so both documents reach the prompt in the same shape."""
    text = _WHITESPACE_RE.sub(" ", text).strip()
    text = text.replace("\f", "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _EXCESS_NEWLINES_RE.sub("\n\n", text)


def is_valid_pdf(data: str) -> bool:
    """Check the %PDF magic number. Never raises."""
    try:
        return _decode(data)[:4] == PDF_MAGIC
    except (ValueError, TypeError, AttributeError) as e:
        logger.debug("PDF validation failed: %s", e)
        return False


def extract_text(data: str) -> str:
    """Extract normalized text from a base64 encoded PDF."""
    try:
        raw = read_pdf(_decode(data))
    except Exception as e:
        logger.error("Error extracting text from PDF: %s", e)
        raise ExtractionError(f"Failed to extract text from PDF: {e}") from e

    if not raw.text:
        raise ExtractionError("Failed to extract text from PDF: no text content")

    return clean_text(raw.text)


async def extract_text_async(data: str) -> str:
    """Run extract_text in a worker thread; pdfplumber is CPU bound and blocking."""
    return await asyncio.to_thread(extract_text, data)


def _info_str(value) -> str | None:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def get_metadata(data: str) -> PdfMetadata:
    """Page count, raw text length, title and author. Diagnostic only."""
    try:
        raw = read_pdf(_decode(data))
    except Exception as e:
        logger.error("Error getting PDF metadata: %s", e)
        raise ExtractionError(f"Failed to get PDF metadata: {e}") from e

    return PdfMetadata(
        page_count=raw.num_pages,
        text_length=len(raw.text),
        title=_info_str(raw.info.get("Title")),
        author=_info_str(raw.info.get("Author")),
    )
