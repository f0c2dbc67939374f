"""
Exception classes for mxlyrics.

This module defines the custom exceptions used throughout the lyrics pipeline.
Most of them never reach the host: the lyrics fetch chain treats them as
"no data" and moves on to the next strategy. Only AcquisitionError is
propagated out of the token layer.

Exception Hierarchy:
    MxLyricsError (base)
        TransientNetworkError - Timeouts, connection failures, HTTP errors
        ProviderStatusError - Non-200 status in the provider envelope
        ParseError - Malformed JSON/HTML or missing fields
        PersistenceError - Token file read/write failures
        AcquisitionError - Every token acquisition strategy failed
"""

from typing import Optional


class MxLyricsError(Exception):
    """
    Base exception for all mxlyrics errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., url, status).

    Example:
        try:
            token = manager.get_token()
        except MxLyricsError as e:
            logger.error(f"Token lookup failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'url': URL that caused the error
                     - 'status_code': Provider status code
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class TransientNetworkError(MxLyricsError):
    """
    Raised when an HTTP request fails below the provider envelope.

    Covers timeouts, connection failures and non-2xx HTTP responses. Inside a
    fallback chain this is never retried in place: the chain just moves on to
    the next strategy.
    """
    pass


class ProviderStatusError(MxLyricsError):
    """
    Raised when the provider envelope carries a status code other than 200.

    Hard failure on the token endpoint, treated like a transient error by the
    lyrics fetch chain.

    Attributes:
        status_code: The status code found in message.header.status_code
                     (0 when the header is missing).
    """

    def __init__(self, status_code: int, message: Optional[str] = None,
                 details: Optional[dict] = None) -> None:
        super().__init__(message or f"Musixmatch API error: {status_code}", details)
        self.status_code = status_code

    @property
    def is_auth_error(self) -> bool:
        """True when the provider rejected the user token"""
        return self.status_code == 401


class ParseError(MxLyricsError):
    """
    Raised when a response cannot be decoded or lacks the expected fields.

    Treated as "no data" everywhere.
    """
    pass


class PersistenceError(MxLyricsError):
    """
    Raised when the token file cannot be read or written.

    Always swallowed by the TokenManager, the token can be re-acquired.
    """
    pass


class AcquisitionError(MxLyricsError):
    """
    Raised when no token could be obtained from any strategy.

    This is the single error type propagated out of the token layer.

    Example:
        raise AcquisitionError(
            "Failed to extract token from API response",
            details={'url': 'https://apic-desktop.musixmatch.com/ws/1.1/token.get'}
        )
    """
    pass
