"""
Exceptions raised by the capture.page client.
"""


class CaptureError(Exception):
    """Base class for every error raised by this package."""
    pass


class MissingCredentials(CaptureError):
    """Raised when the API key or secret is empty."""

    def __init__(self, message: str = "Key and Secret are required"):
        super().__init__(message)


class MissingUrl(CaptureError):
    """Raised when no target URL is given."""

    def __init__(self, message: str = "URL is required"):
        super().__init__(message)


class InvalidUrl(CaptureError):
    """Raised when the target URL is not a string."""

    def __init__(self, message: str = "URL should be a string"):
        super().__init__(message)


class TransportError(CaptureError):
    """
    HTTP request failed.

    Wraps connection errors, timeouts and undecodable response bodies.
    The underlying exception, if any, is available as ``__cause__``.
    """
    pass
