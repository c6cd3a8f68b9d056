"""Per-user try-on session state.

A :class:`TryOnSession` is the explicit, UI-independent record of what one
user has selected: the two images, the options, the live result and the last
error.  Front-ends keep one per user and drive it through these methods
instead of holding loose mutable variables.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Literal

from .assets import ImageAsset
from .config import FitroomConfig, config
from .errors import FitroomError
from .models import GenerationOptions, GenerationResult
from .pipeline import GenerationPipeline
from .prompt_builder import FitType

logger = logging.getLogger(__name__)

Slot = Literal["person", "garment"]


@dataclass
class SessionError:
    """A user-visible error with an expiry time (``time.monotonic`` based)."""

    message: str
    error_type: str
    expires_at: float

    def is_visible(self, now: float) -> bool:
        return now < self.expires_at


@dataclass
class TryOnSession:
    """Session state for one user.

    Attributes:
        person: Selected person photo, if any.
        garment: Selected garment photo, if any.
        options: Current fit and extra instructions; starts on the regular
            fit, the selection the page shows first.
        api_key_override: User-entered key, beats the configured default.
        result: The live result; at most one exists at a time.
        error: The last error, cleared by any new selection or removal.
        is_generating: True while a generation is in flight.
        error_display_seconds: How long an error stays visible, taken from
            ``config.error_display_seconds`` unless given.
    """

    person: ImageAsset | None = None
    garment: ImageAsset | None = None
    options: GenerationOptions = field(
        default_factory=lambda: GenerationOptions(fit=FitType.REGULAR)
    )
    api_key_override: str = ""
    result: GenerationResult | None = None
    error: SessionError | None = None
    is_generating: bool = False
    error_display_seconds: float = field(default_factory=lambda: config.error_display_seconds)

    @classmethod
    def from_config(cls, cfg: FitroomConfig, **kwargs) -> TryOnSession:
        return cls(error_display_seconds=cfg.error_display_seconds, **kwargs)

    @property
    def can_generate(self) -> bool:
        return self.person is not None and self.garment is not None and not self.is_generating

    def set_image(self, slot: Slot, asset: ImageAsset) -> None:
        setattr(self, slot, asset)
        self.error = None

    def set_image_from_data_url(self, slot: Slot, data_url: str) -> None:
        """Ingest an uploaded file; a rejected file leaves the slot unchanged."""
        try:
            asset = ImageAsset.from_data_url(data_url)
        except FitroomError as e:
            self.record_error(e)
            raise
        self.set_image(slot, asset)

    def remove_image(self, slot: Slot) -> None:
        setattr(self, slot, None)
        self.error = None

    def record_error(self, error: FitroomError, now: float | None = None) -> SessionError:
        now = time.monotonic() if now is None else now
        self.error = SessionError(
            message=error.user_message,
            error_type=type(error).__name__,
            expires_at=now + self.error_display_seconds,
        )
        return self.error

    def visible_error(self, now: float | None = None) -> SessionError | None:
        """Return the error if it has not expired yet."""
        now = time.monotonic() if now is None else now
        if self.error is not None and not self.error.is_visible(now):
            self.error = None
        return self.error

    async def generate(self, pipeline: GenerationPipeline) -> GenerationResult | None:
        """Run one generation and store its outcome on the session.

        Returns:
            The new result, or ``None`` when the generation failed (the
            failure is available through :meth:`visible_error`).
        """
        if self.is_generating:
            logger.info("Ignoring generate request while one is in flight")
            return None

        self.is_generating = True
        self.result = None
        self.error = None
        try:
            self.result = await pipeline.generate(
                self.person,
                self.garment,
                self.options,
                api_key=self.api_key_override or None,
            )
        except FitroomError as e:
            logger.warning(f"Generation failed: {type(e).__name__}: {e}")
            self.record_error(e)
        finally:
            self.is_generating = False
        return self.result
