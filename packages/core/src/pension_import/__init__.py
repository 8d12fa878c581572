"""Pension Import - deposit extraction from Meitav pension statements."""

__version__ = "0.1.0"

from .bulk import build_bulk_request, validate_bulk_request
from .config import ParserSettings, load_settings
from .exceptions import ExtractionError, PensionImportError
from .models import ParsedDeposit, ParseResult
from .parser import MeitavParser, get_pdf_raw_text, parse_meitav_pdf
from .text_extraction import PdfTextExtractor, TextExtractor

__all__ = [
    "MeitavParser",
    "parse_meitav_pdf",
    "get_pdf_raw_text",
    "ParsedDeposit",
    "ParseResult",
    "ParserSettings",
    "load_settings",
    "PdfTextExtractor",
    "TextExtractor",
    "build_bulk_request",
    "validate_bulk_request",
    "PensionImportError",
    "ExtractionError",
]
