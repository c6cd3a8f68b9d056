"""Data models for try-on requests and upstream responses."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Union

from .assets import ImageAsset
from .prompt_builder import FitType, build_prompt

logger = logging.getLogger(__name__)


@dataclass
class GenerationOptions:
    """User-chosen options, read once when a request is built."""

    fit: FitType | str | None = None
    extra_instructions: str = ""


@dataclass(frozen=True)
class GenerationRequest:
    """One fully assembled request: prompt plus the two images.

    Built fresh for every ``generate`` call and never mutated.
    """

    prompt: str
    person: ImageAsset
    garment: ImageAsset

    @classmethod
    def build(
        cls, person: ImageAsset, garment: ImageAsset, options: GenerationOptions
    ) -> GenerationRequest:
        return cls(prompt=build_prompt(options), person=person, garment=garment)

    def to_payload(self) -> dict:
        """JSON body for ``generateContent``."""
        return {
            "contents": [
                {
                    "parts": [
                        {"text": self.prompt},
                        self.person.to_inline_part(),
                        self.garment.to_inline_part(),
                    ]
                }
            ],
            "generationConfig": {
                "responseModalities": ["IMAGE"],
            },
        }


@dataclass(frozen=True)
class GenerationResult:
    """A successful generation.

    Attributes:
        image: The composited output image.
        prompt: Prompt that produced it.
        model_id: Upstream model that produced it.
    """

    image: ImageAsset
    prompt: str
    model_id: str

    @property
    def data_url(self) -> str:
        return self.image.to_data_url()


# ---------------------------------------------------------------------------
# Tagged response parsing.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImagePart:
    image: ImageAsset


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class Malformed:
    reason: str


ParsedResponse = Union[ImagePart, TextPart, Malformed]


def _first_candidate_parts(body: Any) -> list | str:
    """Return ``candidates[0].content.parts`` or a reason string."""
    if not isinstance(body, dict):
        return "response body is not an object"

    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return "response has no candidates"

    candidate = candidates[0]
    content = candidate.get("content") if isinstance(candidate, dict) else None
    if not isinstance(content, dict):
        return "first candidate has no content"

    parts = content.get("parts")
    if not isinstance(parts, list):
        return "first candidate has no parts"
    return parts


def _image_from_part(part: Any) -> ImageAsset | None:
    if not isinstance(part, dict):
        return None
    inline = part.get("inlineData")
    if not isinstance(inline, dict):
        return None
    mime_type = inline.get("mimeType")
    data = inline.get("data")
    if not isinstance(mime_type, str) or not mime_type.startswith("image/"):
        return None
    if not isinstance(data, str) or not data:
        return None
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        logger.warning(f"Skipping {mime_type} part with invalid base64 data")
        return None
    return ImageAsset(raw_bytes=raw, mime_type=mime_type)


def parse_response(body: Any) -> ParsedResponse:
    """Classify an upstream ``generateContent`` response.

    Only the first candidate is inspected.  The first inline part whose mime
    type starts with ``image/`` wins, wherever it sits among the parts.
    Without one, the first non-empty text part is returned.  Anything else
    is :class:`Malformed`.
    """
    parts = _first_candidate_parts(body)
    if isinstance(parts, str):
        return Malformed(parts)

    for part in parts:
        image = _image_from_part(part)
        if image is not None:
            return ImagePart(image)

    for part in parts:
        if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]:
            return TextPart(part["text"])

    return Malformed("no image or text part in first candidate")
