"""
Custom Exceptions Module.

This module defines the exceptions used inside the extraction engine.
None of them escape InvoiceFieldExtractor.extract(): each stage catches
its own failures and falls back to a defined default, but specific types
keep the log output and the tests precise.

Exception Hierarchy:
    InvoiceExtractionError (base)
    ├── AcquisitionError
    │   ├── MissingBufferError
    │   └── CorruptedFileError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   └── OCRProcessingError
    ├── ExternalServiceError
    │   └── CompletionServiceError
    ├── FieldValidationError
    └── ConfigurationError
"""


class InvoiceExtractionError(Exception):
    """
    Base exception for all extraction engine errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# ACQUISITION ERRORS
# =============================================================================

class AcquisitionError(InvoiceExtractionError):
    """Base exception for text acquisition errors."""
    pass


class MissingBufferError(AcquisitionError):
    """Raised when an upload arrives without any file content."""

    def __init__(self, filename: str):
        message = f"No file content supplied for: {filename}"
        details = {"filename": filename}
        super().__init__(message, details)


class CorruptedFileError(AcquisitionError):
    """Raised when a file appears to be corrupted or unreadable."""

    def __init__(self, filename: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filename}"
        details = {"filename": filename, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(InvoiceExtractionError):
    """Base exception for OCR-related errors."""
    pass


class OCREngineNotAvailableError(OCRError):
    """Raised when the configured OCR engine is not available."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(OCRError):
    """Raised when OCR processing fails or times out."""

    def __init__(self, source: str, reason: str = None):
        message = f"OCR processing failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTERNAL SERVICE ERRORS
# =============================================================================

class ExternalServiceError(InvoiceExtractionError):
    """Base exception for calls to external services."""
    pass


class CompletionServiceError(ExternalServiceError):
    """
    Raised when the completion service fails.

    Covers transport errors, timeouts, empty responses and payloads that
    are not a single JSON object.

    Example:
        >>> raise CompletionServiceError("Response is not valid JSON", provider="openai")
    """

    def __init__(self, reason: str, provider: str = None):
        message = f"Completion service failed: {reason}"
        details = {"provider": provider, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# VALIDATION / CONFIGURATION ERRORS
# =============================================================================

class FieldValidationError(InvoiceExtractionError):
    """Raised when a candidate value fails field validation."""

    def __init__(self, field: str, value, reason: str = None):
        message = f"Validation failed for field '{field}'"
        details = {"field": field, "value": value, "reason": reason}
        super().__init__(message, details)


class ConfigurationError(InvoiceExtractionError):
    """Raised when configuration names an unknown backend or provider."""

    def __init__(self, key: str, value, reason: str = None):
        message = f"Invalid configuration for '{key}'"
        details = {"key": key, "value": value, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceExtractionError',
    'AcquisitionError',
    'MissingBufferError',
    'CorruptedFileError',
    'OCRError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'ExternalServiceError',
    'CompletionServiceError',
    'FieldValidationError',
    'ConfigurationError',
]
