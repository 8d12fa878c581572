"""Meitav pension statement parser.

Turns an uploaded Meitav statement into a ParseResult:

1. Extract plain text from the PDF (pluggable backend)
2. Read document metadata (provider, report date, member name)
3. Refuse statements from other providers
4. Extract deposit rows line by line
5. Sort deposits by salary month, newest first

Parsing never raises. Unreadable files, the wrong provider, empty tables and
individual bad rows all come back as ``errors`` on the result so callers can
show partial imports together with what went wrong.
"""

from typing import Optional

import structlog

from .config import ParserSettings, load_settings
from .document import extract_metadata
from .exceptions import ConfigurationError
from .models import ParseResult
from .normalizer import split_lines
from .rows import extract_rows
from .text_extraction import PdfTextExtractor, TextExtractor

logger = structlog.get_logger()

NOT_MEITAV_ERROR = "This does not appear to be a Meitav pension report"
NO_DEPOSITS_ERROR = "No deposits found in the PDF"
PARSE_FAILED_PREFIX = "Failed to parse PDF"


def describe_failure(error: BaseException) -> str:
    """Build the error entry for a failed text extraction."""
    detail = str(error).strip()
    if not detail:
        detail = f"Unknown error ({type(error).__name__})"
    return f"{PARSE_FAILED_PREFIX}: {detail}"


class MeitavParser:
    """
    Parser for Meitav pension deposit statements.

    The text extraction backend is injected so tests and callers can
    supply their own; by default a PyPDF2-based extractor is created on
    first use.
    """

    def __init__(
        self,
        text_extractor: Optional[TextExtractor] = None,
        settings: Optional[ParserSettings] = None,
    ):
        """
        Initialize the parser.

        Args:
            text_extractor: Backend that turns document bytes into text.
                            Defaults to PdfTextExtractor.
            settings: Parser settings. Loaded from the environment on first
                      use if omitted.
        """
        self._settings = settings
        self._text_extractor = text_extractor

    @property
    def settings(self) -> ParserSettings:
        """
        Parser settings, loaded from the environment on first access.

        Raises:
            ConfigurationError: If the environment holds an invalid setting
        """
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    def _get_text_extractor(self) -> TextExtractor:
        """Lazily create the default PDF backend when none was injected."""
        if self._text_extractor is None:
            self._text_extractor = PdfTextExtractor(self.settings)
        return self._text_extractor

    def get_raw_text(self, data: bytes) -> str:
        """
        Return the document text without any parsing, for tuning the
        recognizers against real statements.

        Unlike ``parse``, extraction errors propagate to the caller.
        """
        return self._get_text_extractor().extract_text(data)

    def parse(self, data: bytes) -> ParseResult:
        """
        Parse a Meitav statement and extract its deposits.

        Args:
            data: Raw document bytes

        Returns:
            ParseResult with deposits and diagnostics
        """
        try:
            settings = self.settings
            text = self._get_text_extractor().extract_text(data)
        except ConfigurationError as e:
            logger.error("parser_configuration_invalid", error=str(e), **e.details)
            return ParseResult(success=False, errors=[describe_failure(e)])
        except Exception as e:
            logger.error("pdf_text_extraction_failed", error=str(e), error_type=type(e).__name__)
            return ParseResult(success=False, errors=[describe_failure(e)])

        return self._parse_text(text, settings)

    def parse_text(self, text: str) -> ParseResult:
        """
        Parse statement text that has already been extracted.

        Args:
            text: Plain text of the statement

        Returns:
            ParseResult with deposits and diagnostics

        Raises:
            ConfigurationError: If settings were not given and the
                environment holds an invalid one
        """
        return self._parse_text(text, self.settings)

    def _parse_text(self, text: str, settings: ParserSettings) -> ParseResult:
        errors: list[str] = []
        warnings: list[str] = []

        metadata = extract_metadata(text)

        if not metadata.is_meitav:
            logger.info("provider_mismatch", chars=len(text))
            return ParseResult(
                success=False,
                errors=[NOT_MEITAV_ERROR],
                provider_name=metadata.provider_name,
                report_date=metadata.report_date,
                member_name=metadata.member_name,
            )

        if metadata.report_date is None:
            warnings.append("Report date not found in the PDF")

        extraction = extract_rows(
            split_lines(text),
            max_amount=settings.max_deposit_amount,
            max_workers=settings.max_workers,
        )
        errors.extend(extraction.errors)

        # sorted() is stable, so equal salary months keep their source order
        deposits = sorted(
            extraction.deposits,
            key=lambda d: d.salary_month,
            reverse=True,
        )

        success = len(deposits) > 0
        if not success and not errors:
            errors.append(NO_DEPOSITS_ERROR)

        if success and extraction.rejected:
            warnings.append(
                f"{len(deposits)} of {extraction.candidate_rows} deposit rows were read; "
                f"{extraction.rejected} could not be read"
            )

        logger.info(
            "pension_statement_parsed",
            provider=metadata.provider_name,
            deposits=len(deposits),
            errors=len(errors),
            skipped_lines=extraction.skipped,
        )

        return ParseResult(
            success=success,
            deposits=deposits,
            errors=errors,
            warnings=warnings,
            provider_name=metadata.provider_name,
            report_date=metadata.report_date,
            member_name=metadata.member_name,
        )


def parse_meitav_pdf(
    data: bytes,
    *,
    text_extractor: Optional[TextExtractor] = None,
    settings: Optional[ParserSettings] = None,
) -> ParseResult:
    """Parse a Meitav statement with a one-off parser."""
    return MeitavParser(text_extractor=text_extractor, settings=settings).parse(data)


def get_pdf_raw_text(
    data: bytes,
    *,
    text_extractor: Optional[TextExtractor] = None,
    settings: Optional[ParserSettings] = None,
) -> str:
    """Return the raw text of a document for debugging."""
    return MeitavParser(text_extractor=text_extractor, settings=settings).get_raw_text(data)
