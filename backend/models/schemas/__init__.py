"""Pydantic contracts shared between services."""

from models.schemas.pdf_metadata import PdfMetadata

__all__ = [
    "PdfMetadata",
]
