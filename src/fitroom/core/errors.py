"""Error taxonomy for the try-on pipeline.

Every failure the pipeline can report derives from :class:`FitroomError`.
Each error carries a ``user_message`` that can be shown as-is and the HTTP
status code the web layer answers with.  None of them are fatal: after any
error the pipeline can be invoked again immediately.
"""


class FitroomError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500
    default_message = "Something went wrong while generating the image."

    def __init__(self, message: str | None = None, *, user_message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = user_message or message or self.default_message


class InvalidInputError(FitroomError):
    """An uploaded file is not a usable image."""

    status_code = 400
    default_message = "Please upload image files only (JPG, PNG)."


class MissingCredentialsError(FitroomError):
    """No API key was supplied or configured."""

    status_code = 401
    default_message = "Missing API key. Add one in the settings."


class ConfigurationError(FitroomError):
    """An option value outside the supported set reached the pipeline."""

    status_code = 500


class TransportError(FitroomError):
    """An attempt to reach the upstream endpoint failed."""

    status_code = 502
    default_message = "Could not reach the image generation service."


class UpstreamStatusError(TransportError):
    """The upstream endpoint answered with a non-success HTTP status.

    Attributes:
        http_status: Status code returned by the upstream endpoint.
        detail: Structured ``error.message`` from the body, or the raw body.
    """

    def __init__(self, http_status: int, detail: str) -> None:
        super().__init__(f"API {http_status}: {detail}")
        self.http_status = http_status
        self.detail = detail


class AuthenticationError(FitroomError):
    """Upstream rejected the request as unauthorised (HTTP 400/403)."""

    status_code = 401
    default_message = "Authentication error. Check your API key."


class QuotaExceededError(FitroomError):
    """Upstream quota exhausted (HTTP 429)."""

    status_code = 429
    default_message = "Quota exceeded (error 429). Try again later or review your plan."


class ModelRefusalError(FitroomError):
    """The model answered with text instead of an image.

    ``str(error)`` is the model text verbatim; ``user_message`` prefixes it
    so the user can tell it came from the model.
    """

    status_code = 422

    def __init__(self, text: str) -> None:
        super().__init__(text, user_message=f"Model: {text}")
        self.text = text


class UnexpectedResponseFormatError(FitroomError):
    """The upstream response matched no known shape."""

    status_code = 502
    default_message = "Unknown response format."


class GenerationInProgressError(FitroomError):
    """A second generation was started while one is still running."""

    status_code = 409
    default_message = "A generation is already running. Please wait for it to finish."
