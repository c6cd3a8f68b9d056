"""Try-on generation pipeline.

:class:`GenerationPipeline` turns two images and a :class:`GenerationOptions`
value into exactly one :meth:`GenerativeClient.send_with_retry` call and
either a :class:`GenerationResult` or a classified :class:`FitroomError`.

Flow
----
1. Check both assets are present and a credential is available (no network
   call otherwise).
2. Build the prompt and the ``generateContent`` payload.
3. Send it with bounded retries.
4. Classify the final transport failure by HTTP status code.
5. Parse the first candidate: image part -> result, text part -> refusal,
   anything else -> unexpected format.

Only one generation may run at a time per pipeline.  A second call while one
is in flight is rejected with :class:`GenerationInProgressError`.

Usage
-----
::

    pipeline = GenerationPipeline(config)
    result = await pipeline.generate(person, garment, GenerationOptions(fit="slim"))
    html_src = result.data_url
"""

from __future__ import annotations

import asyncio
import logging

from .assets import ImageAsset
from .client import GenerativeClient
from .config import FitroomConfig
from .errors import (
    AuthenticationError,
    FitroomError,
    GenerationInProgressError,
    InvalidInputError,
    MissingCredentialsError,
    ModelRefusalError,
    QuotaExceededError,
    TransportError,
    UnexpectedResponseFormatError,
    UpstreamStatusError,
)
from .models import (
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    ImagePart,
    Malformed,
    TextPart,
    parse_response,
)

logger = logging.getLogger(__name__)

AUTH_STATUS_CODES = frozenset({400, 403})
QUOTA_STATUS_CODE = 429


def classify_transport_error(error: TransportError) -> FitroomError:
    """Map a final transport failure onto the user-facing taxonomy.

    Classification uses the HTTP status code, never the message text.
    Errors without a status (network failures) are returned unchanged.
    """
    if isinstance(error, UpstreamStatusError):
        if error.http_status in AUTH_STATUS_CODES:
            return AuthenticationError(str(error), user_message=AuthenticationError.default_message)
        if error.http_status == QUOTA_STATUS_CODE:
            return QuotaExceededError(str(error), user_message=QuotaExceededError.default_message)
    return error


class GenerationPipeline:
    """Orchestrates one try-on generation at a time.

    Attributes:
        _config (FitroomConfig): Credential default, model id, retry policy.
        _client (GenerativeClient): Upstream transport.
    """

    def __init__(self, config: FitroomConfig, client: GenerativeClient | None = None) -> None:
        self._config = config
        self._client = client or GenerativeClient(config)
        self._lock = asyncio.Lock()

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate(
        self,
        person: ImageAsset | None,
        garment: ImageAsset | None,
        options: GenerationOptions,
        api_key: str | None = None,
    ) -> GenerationResult:
        """Generate a try-on image.

        Args:
            person: Photo of the person.
            garment: Photo of the garment.
            options: Fit and extra instructions.
            api_key: User-entered key; overrides the configured default.

        Returns:
            The successful :class:`GenerationResult`.

        Raises:
            InvalidInputError: If either image is missing.
            MissingCredentialsError: If no key is available.
            ConfigurationError: If the fit option is unknown.
            GenerationInProgressError: If another generation is running.
            AuthenticationError, QuotaExceededError, TransportError: On
                upstream failure after all retries.
            ModelRefusalError: If the model answered with text only.
            UnexpectedResponseFormatError: If the response has neither.
        """
        if person is None or garment is None:
            raise InvalidInputError(
                "Both a person image and a garment image are required",
                user_message="Upload both a person photo and a garment photo first.",
            )

        key = self._config.resolve_api_key(api_key)
        if not key:
            raise MissingCredentialsError()

        if self._lock.locked():
            raise GenerationInProgressError()

        async with self._lock:
            request = GenerationRequest.build(person, garment, options)
            logger.info(
                f"Starting generation with model {self._config.model_id} "
                f"(fit={getattr(options.fit, 'value', options.fit)})"
            )

            try:
                body = await self._client.send_with_retry(request.to_payload(), key)
            except TransportError as e:
                classified = classify_transport_error(e)
                if classified is e:
                    raise
                raise classified from e

            result = self._interpret(body, request)
            logger.info(f"Generation finished: {result.image!r}")
            return result

    def _interpret(self, body, request: GenerationRequest) -> GenerationResult:
        parsed = parse_response(body)

        if isinstance(parsed, ImagePart):
            return GenerationResult(
                image=parsed.image,
                prompt=request.prompt,
                model_id=self._config.model_id,
            )
        if isinstance(parsed, TextPart):
            logger.warning(f"Model returned text instead of an image: {parsed.text[:200]}")
            raise ModelRefusalError(parsed.text)
        if isinstance(parsed, Malformed):
            logger.error(f"Unexpected response format: {parsed.reason}")
            raise UnexpectedResponseFormatError(
                f"Unexpected response format: {parsed.reason}",
                user_message=UnexpectedResponseFormatError.default_message,
            )
        raise TypeError(f"Unhandled parse result: {parsed!r}")
