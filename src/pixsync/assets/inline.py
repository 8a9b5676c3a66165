"""Inline image payload detection and decoding.

Project documents carry images either as ``data:`` URLs with a base64
body (freshly drawn or uploaded in the editor) or as references to
files that were already materialized. Only the former is ever written
to disk.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from pixsync.assets.errors import DecodeError

DEFAULT_EXTENSION = "png"

_INLINE_RE = re.compile(
    r"^data:image/(?P<subtype>[a-z0-9.+-]+)(?:;[a-z0-9_.+-]+=[^;,]*)*;base64,(?P<body>.*)$",
    re.IGNORECASE | re.DOTALL,
)

_WHITESPACE_RE = re.compile(r"\s+")

# Media subtype -> file extension
_SUBTYPE_TO_EXT: dict[str, str] = {
    "png": "png",
    "jpeg": "jpg",
    "jpg": "jpg",
    "pjpeg": "jpg",
    "webp": "webp",
    "gif": "gif",
    "bmp": "bmp",
    "svg+xml": "svg",
    "avif": "avif",
}

KNOWN_EXTENSIONS = frozenset({*_SUBTYPE_TO_EXT.values(), "jpeg"})


@dataclass(frozen=True)
class DecodedImage:
    """Raw bytes of an inline image plus the extension to store it under."""

    data: bytes
    extension: str
    media_type: str

    @property
    def size_bytes(self) -> int:
        """Size of image data in bytes."""
        return len(self.data)


def is_inline(value: object) -> bool:
    """Return True if ``value`` is an inline base64 image payload.

    Empty strings, URLs, paths and non-strings are all "not inline".
    """
    if not isinstance(value, str) or not value:
        return False
    return _INLINE_RE.match(value) is not None


def decode_inline(value: str) -> DecodedImage:
    """Decode an inline image payload.

    Args:
        value: A ``data:image/<subtype>;base64,<body>`` string.

    Returns:
        DecodedImage with the raw bytes and the mapped file extension.

    Raises:
        DecodeError: If the value is not inline data or the body is empty,
            truncated or outside the base64 alphabet.
    """
    match = _INLINE_RE.match(value) if isinstance(value, str) else None
    if match is None:
        raise DecodeError("not an inline image payload")

    subtype = match.group("subtype").lower()
    body = _WHITESPACE_RE.sub("", match.group("body"))
    if not body:
        raise DecodeError("empty payload body")

    try:
        data = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(str(e)) from e

    return DecodedImage(
        data=data,
        extension=_SUBTYPE_TO_EXT.get(subtype, DEFAULT_EXTENSION),
        media_type=f"image/{subtype}",
    )


def extension_from_reference(value: str | None, default: str = DEFAULT_EXTENSION) -> str:
    """Derive the file extension an image reference was stored under.

    Inline payloads map through their media type; URLs and paths use the
    suffix of their path component when it is a known image extension.

    Args:
        value: Inline payload, URL, filesystem path, or empty.
        default: Extension returned when nothing usable is found.

    Returns:
        Lowercase extension without the leading dot.
    """
    if not value:
        return default

    match = _INLINE_RE.match(value)
    if match is not None:
        return _SUBTYPE_TO_EXT.get(match.group("subtype").lower(), default)

    suffix = PurePosixPath(urlsplit(value).path).suffix.lower().lstrip(".")
    if suffix in KNOWN_EXTENSIONS:
        return suffix
    return default
