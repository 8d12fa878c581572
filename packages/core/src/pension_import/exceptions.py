"""Custom exceptions for pension statement import.

All exceptions inherit from PensionImportError. They are raised at the
boundaries of the package (PDF text extraction, bulk payload validation,
settings) and are converted into ``ParseResult.errors`` entries by the
parser, which never lets them escape ``MeitavParser.parse``.

Example:
    try:
        text = extractor.extract_text(data)
    except ExtractionError as e:
        logger.warning("text_extraction_failed", **e.details)
    except PensionImportError as e:
        logger.error("import_failed", error=str(e))
"""

from typing import Any, Optional


class PensionImportError(Exception):
    """Base exception for all pension import errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ExtractionError(PensionImportError):
    """Error raised when text cannot be pulled out of a document.

    Attributes:
        document_type: Type of document being processed (if known).

    Example:
        >>> raise ExtractionError("Invalid PDF file format", document_type="pdf")
        ExtractionError: Invalid PDF file format
    """

    def __init__(
        self,
        message: str,
        *,
        document_type: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ExtractionError.

        Args:
            message: Human-readable error description.
            document_type: Type of document (e.g., "pdf").
            details: Optional dictionary with additional context.
            recoverable: Whether extraction can be retried. Defaults to False
                since a corrupt or non-PDF upload will not improve on retry.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.document_type = document_type

        if document_type:
            self.details["document_type"] = document_type


class ValidationError(PensionImportError):
    """Error raised when deposit data fails validation.

    Raised by bulk payload validation when asked to, carrying every
    indexed message collected for the payload.

    Attributes:
        messages: All validation messages collected for the payload.

    Example:
        >>> raise ValidationError(
        ...     "Account ID is required",
        ...     messages=["Account ID is required", "Deposit 2: Invalid deposit"],
        ... )
        ValidationError: Account ID is required
    """

    def __init__(
        self,
        message: str,
        *,
        messages: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.messages = messages or [message]

        if messages:
            self.details["messages"] = list(messages)


class ConfigurationError(PensionImportError):
    """Error raised when parser configuration is invalid.

    Attributes:
        config_key: The configuration key that is problematic.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "PensionImportError",
    "ExtractionError",
    "ValidationError",
    "ConfigurationError",
]
