"""Pydantic request and response models for the Fitroom API.

Models
------
PromptRequest
    Payload for ``POST /api/prompt/compile`` — the user-chosen options.
GenerateRequest
    Payload for ``POST /api/generate`` — options plus both images as data
    URLs and an optional user-entered API key.
GenerateResponse
    Successful ``POST /api/generate`` result.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from fitroom.core.models import GenerationOptions


class PromptRequest(BaseModel):
    """Request body for ``POST /api/prompt/compile``.

    ``fit`` is a plain optional string with no default: unknown, missing or
    null values reach the prompt builder and fail there with a configuration
    error.

    Attributes:
        fit: One of ``"slim"``, ``"regular"``, ``"oversize"``.
        extra_instructions: Optional free text appended to the prompt.
    """

    fit: str | None = Field(
        default=None,
        description="Garment fit: 'slim', 'regular' or 'oversize'.",
    )
    extra_instructions: str = Field(
        default="",
        description="Additional requirements, e.g. 'tucked in'.",
    )

    def to_options(self) -> GenerationOptions:
        return GenerationOptions(fit=self.fit, extra_instructions=self.extra_instructions)


class GenerateRequest(PromptRequest):
    """Request body for ``POST /api/generate``.

    Attributes:
        person_image: Person photo as a ``data:image/...;base64,`` URL.
        garment_image: Garment photo as a ``data:image/...;base64,`` URL.
        api_key: Optional user-entered key; overrides the server default.
    """

    person_image: str | None = Field(
        default=None,
        description="Person photo as a base64 data URL.",
    )
    garment_image: str | None = Field(
        default=None,
        description="Garment photo as a base64 data URL.",
    )
    api_key: str | None = Field(
        default=None,
        description="User-entered API key (overrides the configured key).",
        repr=False,
    )


class GenerateResponse(BaseModel):
    """Response body for a successful ``POST /api/generate``."""

    success: bool = True
    image: str = Field(..., description="Generated image as a data URL.")
    mime_type: str
    compiled_prompt: str
    model_id: str
