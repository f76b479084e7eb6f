"""
Custom Exceptions Module.

This module defines the exceptions used throughout the invoice scan
pipeline. Most extraction problems are soft misses and never raise; the
exceptions below mark the few failures a caller has to route around.

Exception Hierarchy:
    InvoiceScanError (base)
    ├── ConfigurationError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   └── OCRProcessingError
    ├── VendorParseError
    │   └── TableNotFoundError
    └── PayloadError
"""


class InvoiceScanError(Exception):
    """
    Base exception for all invoice scan errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(InvoiceScanError):
    """Raised when a configuration value is present but unusable."""

    def __init__(self, key: str, reason: str = None):
        message = f"Invalid configuration value: {key}"
        details = {"key": key, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(InvoiceScanError):
    """Base exception for OCR-related errors."""
    pass


class OCREngineNotAvailableError(OCRError):
    """Raised when the Tesseract engine is not available."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(OCRError):
    """Raised when OCR processing of a source file fails."""

    def __init__(self, source: str, reason: str = None):
        message = f"OCR processing failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# VENDOR PARSER ERRORS
# =============================================================================

class VendorParseError(InvoiceScanError):
    """
    Raised when the vendor table parser cannot produce a result.

    The pipeline catches this and falls back to the generic extractor.
    """

    def __init__(self, reason: str, details: dict = None):
        message = f"Vendor table parsing failed: {reason}"
        super().__init__(message, details)


class TableNotFoundError(VendorParseError):
    """Raised when no line-item table can be located in the document text."""

    def __init__(self, line_count: int):
        super().__init__(
            "no line-item table found",
            {"lines_scanned": line_count}
        )


# =============================================================================
# PAYLOAD ERRORS
# =============================================================================

class PayloadError(InvoiceScanError):
    """Raised when a vision payload is missing required keys or is not JSON."""

    def __init__(self, reason: str, missing: list = None):
        message = f"Unusable vision payload: {reason}"
        details = {"missing": missing} if missing else {}
        super().__init__(message, details)


__all__ = [
    'InvoiceScanError',
    'ConfigurationError',
    'OCRError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'VendorParseError',
    'TableNotFoundError',
    'PayloadError',
]
