"""
The capture.page client.

Example usage:
    from capture_page import Capture

    capture = Capture(key, secret).with_edge().with_timeout(30)

    url = capture.build_image_url("https://example.com", {"full": True})

    async with capture:
        png = await capture.fetch_image("https://example.com", {"full": True})
        content = await capture.fetch_content("https://example.com")
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator
import asyncio
import json
import logging

import aiohttp
from yarl import URL

from .config import CaptureOptions, load_credentials
from .errors import InvalidUrl, MissingCredentials, MissingUrl, TransportError
from .options import (
    ContentOptions,
    MetadataOptions,
    PdfOptions,
    RequestOptions,
    ScreenshotOptions,
)
from .responses import ContentResponse, MetadataResponse
from .signing import generate_token, to_query_string

logger = logging.getLogger(__name__)


class RequestType(str, Enum):
    """Capture kinds, valued by their URL path segment."""
    IMAGE = "image"
    PDF = "pdf"
    CONTENT = "content"
    METADATA = "metadata"
    ANIMATED = "animated"


class Capture:
    """
    Signed-URL builder and fetcher for the capture.page API.

    Instances are immutable: ``with_edge``, ``with_timeout`` and
    ``with_client`` return reconfigured copies.

    Fetches need an aiohttp session. A session passed with ``with_client``
    is used as-is and never closed here. Otherwise, inside
    ``async with capture:`` one session is shared by all requests and is
    closed when the last such block exits (blocks may nest or overlap
    across tasks). Outside of any block every fetch opens its own.
    """

    API_URL = "https://cdn.capture.page"
    EDGE_URL = "https://edge.capture.page"

    def __init__(self, key: str, secret: str, options: CaptureOptions | None = None):
        self._key = key
        self._secret = secret
        self._options = options or CaptureOptions()
        self._session: aiohttp.ClientSession | None = None
        self._entered = 0  # open `async with` blocks sharing _session

    @classmethod
    def with_options(cls, key: str, secret: str, options: CaptureOptions) -> "Capture":
        return cls(key, secret, options)

    @classmethod
    def from_env(cls, options: CaptureOptions | None = None) -> "Capture":
        """Client using the CAPTURE_KEY and CAPTURE_SECRET environment variables."""
        key, secret = load_credentials()
        return cls(key, secret, options)

    @property
    def key(self) -> str:
        return self._key

    @property
    def options(self) -> CaptureOptions:
        return self._options

    def __repr__(self) -> str:
        return f"Capture(key={self._key!r}, use_edge={self._options.use_edge})"

    # ========================================================================
    # Configuration
    # ========================================================================

    def with_edge(self) -> "Capture":
        return Capture(self._key, self._secret, self._options.with_edge())

    def with_timeout(self, timeout: float) -> "Capture":
        """
        Copy with a new request timeout (seconds).

        Sessions this client manages are created with the new timeout. A
        session installed with ``with_client`` keeps its own settings.
        """
        return Capture(self._key, self._secret, self._options.with_timeout(timeout))

    def with_client(self, client: aiohttp.ClientSession) -> "Capture":
        return Capture(self._key, self._secret, self._options.with_client(client))

    # ========================================================================
    # URL building
    # ========================================================================

    def build_url(
        self,
        request_type: RequestType | str,
        url: str,
        options: RequestOptions | None = None,
    ) -> str:
        """
        Build a signed capture URL.

        Args:
            request_type: Capture kind (RequestType or its string value)
            url: Page to capture
            options: Service parameters; a "url" entry is always replaced
                     by ``url``

        Returns:
            ``{host}/{key}/{token}/{type}?{query}``

        Raises:
            MissingCredentials: If key or secret is empty
            MissingUrl: If url is empty
            InvalidUrl: If url is not a string
        """
        request_type = RequestType(request_type)

        if not self._key or not self._secret:
            raise MissingCredentials()
        if url is None or url == "":
            raise MissingUrl()
        if not isinstance(url, str):
            raise InvalidUrl()

        query_options = dict(options) if options else {}
        query_options["url"] = url

        query = to_query_string(query_options)
        token = generate_token(self._secret, query)

        base_url = self.EDGE_URL if self._options.use_edge else self.API_URL

        return f"{base_url}/{self._key}/{token}/{request_type.value}?{query}"

    def build_image_url(self, url: str, options: RequestOptions | None = None) -> str:
        return self.build_url(RequestType.IMAGE, url, options)

    def build_pdf_url(self, url: str, options: RequestOptions | None = None) -> str:
        return self.build_url(RequestType.PDF, url, options)

    def build_content_url(self, url: str, options: RequestOptions | None = None) -> str:
        return self.build_url(RequestType.CONTENT, url, options)

    def build_metadata_url(self, url: str, options: RequestOptions | None = None) -> str:
        return self.build_url(RequestType.METADATA, url, options)

    def build_animated_url(self, url: str, options: RequestOptions | None = None) -> str:
        return self.build_url(RequestType.ANIMATED, url, options)

    # Structured options

    def build_screenshot_url(self, url: str, options: ScreenshotOptions | None = None) -> str:
        return self.build_url(RequestType.IMAGE, url, _flatten(options))

    def build_pdf_url_structured(self, url: str, options: PdfOptions | None = None) -> str:
        return self.build_url(RequestType.PDF, url, _flatten(options))

    def build_content_url_structured(self, url: str, options: ContentOptions | None = None) -> str:
        return self.build_url(RequestType.CONTENT, url, _flatten(options))

    def build_metadata_url_structured(self, url: str, options: MetadataOptions | None = None) -> str:
        return self.build_url(RequestType.METADATA, url, _flatten(options))

    # ========================================================================
    # Fetching
    # ========================================================================

    async def __aenter__(self) -> "Capture":
        self._entered += 1
        if self._options.client is None and self._session is None:
            self._session = self._new_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._entered -= 1
        # Other blocks (nested or in concurrent tasks) may still be using it
        if self._entered == 0 and self._session is not None:
            session, self._session = self._session, None
            await session.close()

    def _new_session(self) -> aiohttp.ClientSession:
        timeout = self._options.client_timeout()
        if timeout is None:
            return aiohttp.ClientSession()
        return aiohttp.ClientSession(timeout=timeout)

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._options.client is not None:
            yield self._options.client
        elif self._session is not None:
            yield self._session
        else:
            async with self._new_session() as session:
                yield session

    async def _get(self, capture_url: str) -> bytes:
        try:
            async with self._http() as session:
                # encoded=True: the query must reach the service byte-for-byte as signed
                async with session.get(URL(capture_url, encoded=True)) as response:
                    if response.status >= 400:
                        logger.warning(
                            "capture.page answered %s %s",
                            response.status, response.reason,
                        )
                    return await response.read()
        except asyncio.TimeoutError as e:
            raise TransportError("HTTP request failed: timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"HTTP request failed: {e}") from e

    async def _get_json(self, capture_url: str):
        body = await self._get(capture_url)
        try:
            return json.loads(body)
        except ValueError as e:
            raise TransportError(f"HTTP request failed: invalid JSON body: {e}") from e

    async def _fetch_bytes(
        self, request_type: RequestType, url: str, options: RequestOptions | None
    ) -> bytes:
        capture_url = self.build_url(request_type, url, options)
        logger.debug("Fetching %s capture of %s", request_type.value, url)
        data = await self._get(capture_url)
        logger.debug("Received %d bytes for %s", len(data), url)
        return data

    async def _fetch_json(
        self, request_type: RequestType, url: str, options: RequestOptions | None
    ):
        capture_url = self.build_url(request_type, url, options)
        logger.debug("Fetching %s capture of %s", request_type.value, url)
        return await self._get_json(capture_url)

    async def fetch_image(self, url: str, options: RequestOptions | None = None) -> bytes:
        return await self._fetch_bytes(RequestType.IMAGE, url, options)

    async def fetch_pdf(self, url: str, options: RequestOptions | None = None) -> bytes:
        return await self._fetch_bytes(RequestType.PDF, url, options)

    async def fetch_animated(self, url: str, options: RequestOptions | None = None) -> bytes:
        return await self._fetch_bytes(RequestType.ANIMATED, url, options)

    async def fetch_content(
        self, url: str, options: RequestOptions | None = None
    ) -> ContentResponse:
        data = await self._fetch_json(RequestType.CONTENT, url, options)
        return ContentResponse.from_dict(data)

    async def fetch_metadata(
        self, url: str, options: RequestOptions | None = None
    ) -> MetadataResponse:
        data = await self._fetch_json(RequestType.METADATA, url, options)
        return MetadataResponse.from_dict(data)

    # Structured options

    async def fetch_screenshot(self, url: str, options: ScreenshotOptions | None = None) -> bytes:
        return await self._fetch_bytes(RequestType.IMAGE, url, _flatten(options))

    async def fetch_pdf_structured(self, url: str, options: PdfOptions | None = None) -> bytes:
        return await self._fetch_bytes(RequestType.PDF, url, _flatten(options))

    async def fetch_content_structured(
        self, url: str, options: ContentOptions | None = None
    ) -> ContentResponse:
        return await self.fetch_content(url, _flatten(options))

    async def fetch_metadata_structured(
        self, url: str, options: MetadataOptions | None = None
    ) -> MetadataResponse:
        return await self.fetch_metadata(url, _flatten(options))


def _flatten(options) -> RequestOptions | None:
    if options is None:
        return None
    return options.to_request_options()
