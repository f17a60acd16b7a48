"""
Request options for each capture type.

Every structured option set is a plain dataclass. Fields left as None are
not sent. ``to_request_options()`` flattens a set into the generic
``RequestOptions`` mapping, renaming fields to the service's parameter
names (``dark_mode`` -> ``darkMode`` and so on).

Example usage:
    from capture_page import ScreenshotOptions

    options = ScreenshotOptions(vw=1920, vh=1080, full=True, dark_mode=True)
    options.to_request_options()
    # {'vw': 1920, 'vh': 1080, 'full': True, 'darkMode': True}
"""

from dataclasses import dataclass, field, fields
from typing import Any
import math


RequestOptions = dict[str, Any]


def _param(name: str):
    """Optional field sent to the service as ``name``."""
    return field(default=None, metadata={"param": name})


@dataclass
class _OptionSet:
    """Shared conversion for the structured option sets."""

    def to_request_options(self) -> RequestOptions:
        options: RequestOptions = {}

        for f in fields(self):
            param = f.metadata.get("param")
            if param is None:
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, float) and not math.isfinite(value):
                continue
            options[param] = value

        # Merge additional options, allowing overrides
        additional = getattr(self, "additional_options", None)
        if additional:
            options.update(additional)

        return options


@dataclass
class ScreenshotOptions(_OptionSet):
    """Options for image captures."""

    # Viewport
    vw: int | None = _param("vw")
    vh: int | None = _param("vh")
    scale_factor: float | None = _param("scaleFactor")

    # Capture customization
    full: bool | None = _param("full")
    delay: int | None = _param("delay")
    wait_for: str | None = _param("waitFor")
    wait_for_id: str | None = _param("waitForId")

    # Visual modifications
    dark_mode: bool | None = _param("darkMode")
    transparent: bool | None = _param("transparent")
    selector: str | None = _param("selector")
    selector_id: str | None = _param("selectorId")

    # Blocking / detection
    block_cookie_banners: bool | None = _param("blockCookieBanners")
    block_ads: bool | None = _param("blockAds")
    bypass_bot_detection: bool | None = _param("bypassBotDetection")

    # Image output
    image_type: str | None = _param("type")  # png, jpeg, webp
    best_format: bool | None = _param("bestFormat")
    resize_width: int | None = _param("resizeWidth")
    resize_height: int | None = _param("resizeHeight")

    http_auth: str | None = _param("httpAuth")
    user_agent: str | None = _param("userAgent")
    fresh: bool | None = _param("fresh")

    additional_options: RequestOptions | None = None


@dataclass
class PdfOptions(_OptionSet):
    """Options for PDF captures. Dimensions and margins are CSS lengths ("1cm")."""

    http_auth: str | None = _param("httpAuth")
    user_agent: str | None = _param("userAgent")

    # Page dimensions
    width: str | None = _param("width")
    height: str | None = _param("height")
    format: str | None = _param("format")  # A4, Letter, ...

    # Margins
    margin_top: str | None = _param("marginTop")
    margin_right: str | None = _param("marginRight")
    margin_bottom: str | None = _param("marginBottom")
    margin_left: str | None = _param("marginLeft")

    # Rendering
    scale: float | None = _param("scale")
    landscape: bool | None = _param("landscape")
    delay: int | None = _param("delay")

    # Storage
    file_name: str | None = _param("fileName")
    s3_acl: str | None = _param("s3Acl")
    s3_redirect: bool | None = _param("s3Redirect")
    timestamp: bool | None = _param("timestamp")

    additional_options: RequestOptions | None = None


@dataclass
class ContentOptions(_OptionSet):
    """Options for content (HTML / text / markdown) extraction."""

    http_auth: str | None = _param("httpAuth")
    user_agent: str | None = _param("userAgent")
    delay: int | None = _param("delay")
    wait_for: str | None = _param("waitFor")
    wait_for_id: str | None = _param("waitForId")

    additional_options: RequestOptions | None = None


@dataclass
class MetadataOptions(_OptionSet):
    """Metadata captures take no structured options; use additional_options."""

    additional_options: RequestOptions | None = None
