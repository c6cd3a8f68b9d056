"""HTTP transport for the generative-content endpoint.

:class:`GenerativeClient` owns one ``httpx.AsyncClient`` and sends a single
JSON body to ``<api_base_url>/models/<model_id>:generateContent`` with a
bounded, linear-backoff retry loop.

Retry Policy
------------
::

    ATTEMPTING(0) ──ok──▶ SUCCESS (body returned as-is)
         │ fail, sleep base*1
         ▼
    ATTEMPTING(1) ──ok──▶ SUCCESS
         │ fail, sleep base*2
         ▼
    ATTEMPTING(2) ──ok──▶ SUCCESS
         │ fail
         ▼
       FAILED (last error re-raised unchanged)

With the defaults (``max_retries=2``, ``retry_base_delay=1.0``) that is three
attempts separated by 1s and 2s.  Every failure is retried the same way,
whatever the status code.  There is no jitter and no per-request deadline
unless ``request_timeout`` is configured.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from .config import FitroomConfig
from .errors import TransportError, UpstreamStatusError

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


def extract_error_message(response: httpx.Response) -> str:
    """Return ``error.message`` from a JSON error body, else the raw text."""
    text = response.text
    try:
        payload = response.json()
    except ValueError:
        return text
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return text


class GenerativeClient:
    """Async client for ``generateContent`` with bounded retries.

    Args:
        config: Supplies the URL, retry policy and timeout.
        transport: Optional ``httpx`` transport (tests use ``httpx.MockTransport``).
        sleep: Awaitable used for backoff delays, ``asyncio.sleep`` by default.
    """

    def __init__(
        self,
        config: FitroomConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._config = config
        self._sleep = sleep
        self._http = httpx.AsyncClient(transport=transport, timeout=config.request_timeout)

    @property
    def url(self) -> str:
        return self._config.generate_url

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _attempt(self, body: dict, api_key: str) -> Any:
        """Perform one POST and return the decoded JSON body.

        Raises:
            UpstreamStatusError: On a non-2xx response.
            TransportError: On a network failure or an undecodable success body.
        """
        try:
            response = await self._http.post(self.url, params={"key": api_key}, json=body)
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise UpstreamStatusError(response.status_code, extract_error_message(response))

        try:
            return response.json()
        except ValueError as e:
            raise TransportError("Upstream returned a success status with a non-JSON body") from e

    async def send_with_retry(self, body: dict, api_key: str) -> Any:
        """Send *body*, retrying failed attempts with linear backoff.

        Args:
            body: JSON request body.
            api_key: Credential, sent as the ``key`` query parameter.

        Returns:
            The decoded JSON body of the first successful attempt.

        Raises:
            TransportError: The error from the final attempt, unchanged.
        """
        max_retries = self._config.max_retries
        attempt = 0
        while True:
            try:
                return await self._attempt(body, api_key)
            except TransportError as e:
                if attempt + 1 > max_retries:
                    logger.error(f"Giving up after {attempt + 1} attempt(s): {e}")
                    raise
                delay = self._config.retry_base_delay * (attempt + 1)
                logger.warning(
                    f"Attempt {attempt + 1}/{max_retries + 1} failed ({e}); "
                    f"retrying in {delay:.1f}s"
                )
                await self._sleep(delay)
                attempt += 1
