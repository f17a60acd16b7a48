"""
Client configuration.

``CaptureOptions`` holds everything about a client except its credentials.
It is immutable; the ``with_*`` builders return updated copies:

    options = CaptureOptions().with_edge().with_timeout(30)

Credentials normally come from the environment (``CAPTURE_KEY`` and
``CAPTURE_SECRET``), see ``load_credentials``.
"""

from dataclasses import dataclass, replace
from typing import Mapping
import os

import aiohttp

from .errors import MissingCredentials

KEY_ENV = "CAPTURE_KEY"
SECRET_ENV = "CAPTURE_SECRET"


@dataclass(frozen=True)
class CaptureOptions:
    """Endpoint, timeout and HTTP transport settings for a client."""

    use_edge: bool = False
    timeout: float | None = None  # seconds, None = aiohttp default
    client: aiohttp.ClientSession | None = None  # caller-owned session

    def with_edge(self) -> "CaptureOptions":
        return replace(self, use_edge=True)

    def with_timeout(self, timeout: float) -> "CaptureOptions":
        return replace(self, timeout=timeout)

    def with_client(self, client: aiohttp.ClientSession) -> "CaptureOptions":
        return replace(self, client=client)

    def client_timeout(self) -> aiohttp.ClientTimeout | None:
        """The timeout to give a session this package creates itself."""
        if self.timeout is None:
            return None
        return aiohttp.ClientTimeout(total=self.timeout)


def load_credentials(environ: Mapping[str, str] | None = None) -> tuple[str, str]:
    """
    Read the API key and secret from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        (key, secret)

    Raises:
        MissingCredentials: If either variable is unset or empty
    """
    if environ is None:
        environ = os.environ

    key = environ.get(KEY_ENV, "")
    secret = environ.get(SECRET_ENV, "")
    if not key or not secret:
        raise MissingCredentials(
            f"{KEY_ENV} and {SECRET_ENV} environment variables are required"
        )
    return key, secret
