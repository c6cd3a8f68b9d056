"""In-memory image assets and file ingestion.

An :class:`ImageAsset` is the decoded form of one user-supplied image: raw
bytes plus the declared mime type.  Browsers hand uploads over as base64
data URLs, so ingestion is mostly splitting and validating those::

    data:image/png;base64,iVBORw0KGgo...
    └────┬───┘        └──────┬──────┘
      mime type          payload

No image decoding happens here.  The declared content type is trusted as
long as it starts with ``image/``.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64"


def _require_image_type(content_type: str | None) -> str:
    mime_type = (content_type or "").strip().lower()
    if not mime_type.startswith("image/"):
        logger.info(f"Rejected upload with content type {content_type!r}")
        raise InvalidInputError(f"Not an image file: {content_type or 'unknown type'}")
    return mime_type


def split_data_url(data_url: str) -> tuple[str, str]:
    """Split a base64 data URL into ``(mime_type, base64_payload)``.

    Args:
        data_url: A ``data:<mime>;base64,<payload>`` string.

    Returns:
        Tuple of the declared mime type and the untouched base64 payload.

    Raises:
        InvalidInputError: If the string is not a base64 data URL.
    """
    if not data_url or not data_url.startswith(_DATA_URL_PREFIX) or "," not in data_url:
        raise InvalidInputError("Malformed data URL")

    header, payload = data_url[len(_DATA_URL_PREFIX) :].split(",", 1)
    if not header.endswith(_BASE64_MARKER):
        raise InvalidInputError("Only base64 data URLs are supported")

    mime_type = header[: -len(_BASE64_MARKER)].split(";")[0]
    return mime_type, payload


@dataclass(frozen=True)
class ImageAsset:
    """One decoded image held in memory.

    Attributes:
        raw_bytes: The image file contents.
        mime_type: Declared content type, always starting with ``image/``.
    """

    raw_bytes: bytes
    mime_type: str

    def __post_init__(self) -> None:
        _require_image_type(self.mime_type)
        if not self.raw_bytes:
            raise InvalidInputError("Image file is empty")

    @classmethod
    def from_bytes(cls, raw_bytes: bytes, content_type: str | None) -> ImageAsset:
        """Create an asset from uploaded bytes and their declared type."""
        return cls(raw_bytes=raw_bytes, mime_type=_require_image_type(content_type))

    @classmethod
    def from_base64(cls, payload: str, content_type: str | None) -> ImageAsset:
        """Create an asset from a base64 payload and its declared type.

        Raises:
            InvalidInputError: If the type is not an image or the payload
                is not valid base64.
        """
        mime_type = _require_image_type(content_type)
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidInputError("Image data is not valid base64") from e
        return cls(raw_bytes=raw, mime_type=mime_type)

    @classmethod
    def from_data_url(cls, data_url: str) -> ImageAsset:
        """Create an asset from a browser ``FileReader`` data URL."""
        mime_type, payload = split_data_url(data_url)
        return cls.from_base64(payload, mime_type)

    def to_base64(self) -> str:
        return base64.b64encode(self.raw_bytes).decode("ascii")

    def to_data_url(self) -> str:
        """Single addressable resource for display or download."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def to_inline_part(self) -> dict:
        """Request part carrying this image inline."""
        return {"inlineData": {"mimeType": self.mime_type, "data": self.to_base64()}}

    def __repr__(self) -> str:
        return f"ImageAsset(mime_type={self.mime_type!r}, size={len(self.raw_bytes)})"
