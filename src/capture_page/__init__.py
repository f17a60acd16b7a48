"""
capture-page - Python client for the capture.page API.

Usage:
    from capture_page import Capture, ScreenshotOptions

    capture = Capture(key, secret)
    url = capture.build_screenshot_url(
        "https://example.com", ScreenshotOptions(full=True, dark_mode=True)
    )
"""

__version__ = "0.1.0"

# Public API exports
from .client import Capture, RequestType
from .config import CaptureOptions, load_credentials
from .errors import (
    CaptureError,
    InvalidUrl,
    MissingCredentials,
    MissingUrl,
    TransportError,
)
from .options import (
    ContentOptions,
    MetadataOptions,
    PdfOptions,
    RequestOptions,
    ScreenshotOptions,
)
from .responses import ContentResponse, MetadataResponse

__all__ = [
    # Version
    "__version__",
    # Client
    "Capture",
    "CaptureOptions",
    "RequestType",
    "load_credentials",
    # Options
    "RequestOptions",
    "ScreenshotOptions",
    "PdfOptions",
    "ContentOptions",
    "MetadataOptions",
    # Result types
    "ContentResponse",
    "MetadataResponse",
    # Exceptions
    "CaptureError",
    "MissingCredentials",
    "MissingUrl",
    "InvalidUrl",
    "TransportError",
]
