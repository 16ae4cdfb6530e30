"""
Error taxonomy for a plagiarism check run.
Every error carries a human-readable message naming the document or pair
that failed, plus the HTTP status the API layer reports it with.
"""

from typing import Optional, Dict, Any


class PlagiarismCheckError(Exception):
    """Base exception for all plagiarism check errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InputError(PlagiarismCheckError):
    """Raised when no usable input was provided for the selected mode."""

    status_code = 400


class ExtractionError(PlagiarismCheckError):
    """Raised when the provider could not extract text from a document."""

    status_code = 422

    def __init__(self, file_name: str, reason: str, **kwargs):
        self.file_name = file_name
        message = f"Failed to extract text from file: {file_name}. {reason}"
        super().__init__(message, **kwargs)


class ProviderError(PlagiarismCheckError):
    """Raised when the provider call itself fails (network, quota, server fault)."""

    status_code = 502


class ResponseParseError(PlagiarismCheckError):
    """Base class for provider responses that cannot be turned into a result."""

    status_code = 502


class NonJSONResponseError(ResponseParseError):
    """Raised when a free-text response holds no JSON candidate at all."""

    def __init__(self, message: str = "Received a non-JSON response from the API.", **kwargs):
        super().__init__(message, **kwargs)


class MalformedJSONError(ResponseParseError):
    """Raised when a JSON candidate was found but does not parse."""

    def __init__(self, message: str = "API returned malformed JSON.", **kwargs):
        super().__init__(message, **kwargs)


class MalformedResponseError(ResponseParseError):
    """Raised when a structured-output response is not valid JSON."""


class UnexpectedFormatError(ResponseParseError):
    """Raised when parsed JSON lacks required fields or has wrong value types."""
