"""Core try-on functionality.

- **FitroomConfig / config**: settings loaded from ``FITROOM_*`` variables
- **ImageAsset**: in-memory image ingestion and encoding
- **build_prompt**: fit-aware prompt compilation
- **GenerativeClient**: ``generateContent`` transport with bounded retries
- **GenerationPipeline**: orchestration and error classification
- **TryOnSession**: explicit per-user session state

Usage Example
-------------
::

    from fitroom.core import GenerationOptions, GenerationPipeline, ImageAsset, config

    pipeline = GenerationPipeline(config)
    person = ImageAsset.from_data_url(person_data_url)
    garment = ImageAsset.from_data_url(garment_data_url)
    result = await pipeline.generate(person, garment, GenerationOptions(fit="regular"))
"""

from fitroom.core.assets import ImageAsset
from fitroom.core.client import GenerativeClient
from fitroom.core.config import FitroomConfig, config
from fitroom.core.models import GenerationOptions, GenerationRequest, GenerationResult
from fitroom.core.pipeline import GenerationPipeline
from fitroom.core.prompt_builder import FitType, build_prompt
from fitroom.core.session import TryOnSession

__all__ = [
    "FitType",
    "FitroomConfig",
    "GenerationOptions",
    "GenerationPipeline",
    "GenerationRequest",
    "GenerationResult",
    "GenerativeClient",
    "ImageAsset",
    "TryOnSession",
    "build_prompt",
    "config",
]
