"""
Decoded JSON responses from the content and metadata endpoints.
"""

from dataclasses import dataclass, field
from typing import Any

from .errors import TransportError


def _require(data: dict, name: str, kind: type) -> Any:
    if name not in data:
        raise TransportError(f"Malformed response: missing '{name}'")
    value = data[name]
    if not isinstance(value, kind):
        raise TransportError(
            f"Malformed response: '{name}' should be {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


@dataclass
class ContentResponse:
    """Page content as returned by the content endpoint."""

    success: bool
    html: str
    text_content: str
    markdown: str

    @classmethod
    def from_dict(cls, data: Any) -> "ContentResponse":
        """Build from the decoded JSON body (``textContent`` -> ``text_content``)."""
        if not isinstance(data, dict):
            raise TransportError("Malformed response: expected a JSON object")
        return cls(
            success=_require(data, "success", bool),
            html=_require(data, "html", str),
            text_content=_require(data, "textContent", str),
            markdown=_require(data, "markdown", str),
        )


@dataclass
class MetadataResponse:
    """Page metadata as returned by the metadata endpoint."""

    success: bool
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "MetadataResponse":
        if not isinstance(data, dict):
            raise TransportError("Malformed response: expected a JSON object")
        return cls(
            success=_require(data, "success", bool),
            metadata=_require(data, "metadata", dict),
        )
