"""Diagnostic metadata read from an uploaded PDF."""

from pydantic import BaseModel


class PdfMetadata(BaseModel):
    page_count: int = 0
    text_length: int = 0  # length of the raw, un-normalized text
    title: str | None = None
    author: str | None = None
