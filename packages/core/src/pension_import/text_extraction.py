"""PDF-to-text extraction for pension statements.

The parser only needs plain text from the uploaded document. This module
defines the small protocol the parser depends on and the default PDF
backend: PyPDF2 first, with pdfplumber as a fallback when PyPDF2 returns
little or no text.
"""

import re
from io import BytesIO
from typing import Optional, Protocol, runtime_checkable

import structlog
from PyPDF2 import PdfReader

try:
    import pdfplumber
    HAS_PDFPLUMBER = True
except ImportError:
    HAS_PDFPLUMBER = False

from .config import ParserSettings, load_settings
from .exceptions import ExtractionError

logger = structlog.get_logger()

PDF_MAGIC = b"%PDF-"


@runtime_checkable
class TextExtractor(Protocol):
    """Anything that turns document bytes into plain text.

    Implementations may raise any exception; ``MeitavParser.parse``
    converts failures into result errors.
    """

    def extract_text(self, data: bytes) -> str:
        ...


class PdfTextExtractor:
    """
    Extract text from PDF bytes.

    Uploads are checked before parsing: they must be non-empty, within the
    size limit and start with the PDF magic number.
    """

    def __init__(self, settings: Optional[ParserSettings] = None):
        self._settings = settings or load_settings()

    def validate(self, data: bytes) -> None:
        """
        Reject input that cannot be a PDF we are willing to parse.

        Raises:
            ExtractionError: If the input is empty, too large or not a PDF
        """
        if not data:
            raise ExtractionError("Document is empty", document_type="pdf")

        max_size = self._settings.max_file_size_bytes
        if len(data) > max_size:
            raise ExtractionError(
                f"File size must be less than {max_size // (1024 * 1024)}MB",
                document_type="pdf",
                details={"size": len(data), "max_size": max_size},
            )

        if not data.startswith(PDF_MAGIC):
            raise ExtractionError("Invalid PDF file format", document_type="pdf")

    def extract_text(self, data: bytes) -> str:
        """
        Extract the text of every page, joined with newlines.

        Args:
            data: Raw PDF bytes

        Returns:
            The document text

        Raises:
            ExtractionError: If the document is invalid, unreadable or encrypted
        """
        self.validate(data)

        try:
            reader = PdfReader(BytesIO(data))
        except Exception as e:
            raise ExtractionError(f"Unreadable PDF: {e}", document_type="pdf") from e

        if reader.is_encrypted and not reader.decrypt(""):
            raise ExtractionError("PDF is encrypted", document_type="pdf")

        pages: list[str] = []
        for page_num, page in enumerate(reader.pages, start=1):
            try:
                pages.append(page.extract_text() or "")
            except Exception as e:
                logger.warning("page_extraction_failed", page=page_num, error=str(e))
                pages.append("")

        full_text = "\n".join(pages)

        if HAS_PDFPLUMBER and len(full_text.strip()) < self._settings.min_text_chars:
            logger.info("pypdf2_fallback_pdfplumber", pypdf2_chars=len(full_text.strip()))
            fallback_text = self._extract_with_pdfplumber(data)
            if fallback_text is not None and len(fallback_text.strip()) > len(full_text.strip()):
                full_text = fallback_text

        logger.info("pdf_text_extracted", pages=len(pages), chars=len(full_text))
        return full_text

    def _extract_with_pdfplumber(self, data: bytes) -> Optional[str]:
        """Extract text with pdfplumber, or None if it fails."""
        try:
            with pdfplumber.open(BytesIO(data)) as pdf:
                pages = []
                for page_num, page in enumerate(pdf.pages, start=1):
                    try:
                        text = page.extract_text() or ""
                    except Exception as e:
                        logger.warning("pdfplumber_page_failed", page=page_num, error=str(e))
                        text = ""
                    # Glyphs from fonts without a usable ToUnicode map
                    pages.append(re.sub(r'\(cid:\d+\)', '', text))
        except Exception as e:
            logger.warning("pdfplumber_fallback_failed", error=str(e))
            return None

        return "\n".join(pages)
