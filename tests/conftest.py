"""Shared pytest fixtures for Fitroom tests."""

from __future__ import annotations

import base64
from collections.abc import Callable, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from fitroom.core.assets import ImageAsset
from fitroom.core.client import GenerativeClient
from fitroom.core.config import FitroomConfig
from fitroom.core.pipeline import GenerationPipeline

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"person-pixels"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"garment-pixels"
OUTPUT_BYTES = b"\x89PNG\r\n\x1a\n" + b"composited-output"


def image_response(data: bytes = OUTPUT_BYTES, mime_type: str = "image/png") -> httpx.Response:
    """A successful upstream response carrying one inline image part."""
    return httpx.Response(
        200,
        json={
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {
                                "inlineData": {
                                    "mimeType": mime_type,
                                    "data": base64.b64encode(data).decode("ascii"),
                                }
                            }
                        ]
                    }
                }
            ]
        },
    )


def text_response(text: str) -> httpx.Response:
    """A successful upstream response carrying only text."""
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def error_response(status: int, message: str = "upstream error") -> httpx.Response:
    """An upstream error response with the structured ``error.message`` body."""
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


class FakeUpstream:
    """Scripted stand-in for the generative endpoint.

    Each request consumes the next scripted item; the last item repeats.
    Items are ``httpx.Response`` objects or exceptions to raise.
    """

    def __init__(self, *script: httpx.Response | Exception) -> None:
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def call_count(self) -> int:
        return len(self.requests)


class SleepRecorder:
    """Replacement for ``asyncio.sleep`` that records delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def test_config() -> FitroomConfig:
    """Configuration with a known key and the default retry policy."""
    return FitroomConfig(
        _env_file=None,
        api_key="test-key",
        api_base_url="https://upstream.test/v1beta",
        model_id="test-image-model",
        max_retries=2,
        retry_base_delay=1.0,
    )


@pytest.fixture
def keyless_config() -> FitroomConfig:
    """Configuration without any API key."""
    return FitroomConfig(
        _env_file=None,
        api_key="",
        api_base_url="https://upstream.test/v1beta",
        model_id="test-image-model",
    )


@pytest.fixture
def person_asset() -> ImageAsset:
    return ImageAsset(raw_bytes=PNG_BYTES, mime_type="image/png")


@pytest.fixture
def garment_asset() -> ImageAsset:
    return ImageAsset(raw_bytes=JPEG_BYTES, mime_type="image/jpeg")


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_pipeline(
    test_config: FitroomConfig, sleep_recorder: SleepRecorder
) -> Callable[..., GenerationPipeline]:
    """Factory building a pipeline wired to a :class:`FakeUpstream`."""

    def _make(upstream: FakeUpstream, config: FitroomConfig | None = None) -> GenerationPipeline:
        cfg = config or test_config
        client = GenerativeClient(cfg, transport=upstream.transport, sleep=sleep_recorder)
        return GenerationPipeline(cfg, client=client)

    return _make


@pytest.fixture
def upstream() -> FakeUpstream:
    """Upstream that succeeds with one image on the first attempt."""
    return FakeUpstream(image_response())


@pytest.fixture
def test_client(
    upstream: FakeUpstream, make_pipeline: Callable[..., GenerationPipeline]
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with the pipeline wired to the fake upstream.

    Tests can re-script ``upstream.script`` before making requests.
    """
    from fitroom.api.main import app

    app.state.pipeline = make_pipeline(upstream)
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.state.pipeline = None
