"""Configuration management for Fitroom.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the FITROOM_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Explicit keyword arguments passed to ``FitroomConfig(...)``
2. Environment variables (FITROOM_* prefix)
3. .env file in the project root
4. Default values defined in FitroomConfig

Example .env file:
    FITROOM_API_KEY=your-key-here
    FITROOM_MODEL_ID=gemini-2.5-flash-image-preview
    FITROOM_MAX_RETRIES=2
    FITROOM_SERVER_PORT=7860

Credentials
-----------
``api_key`` is only the *default* credential.  Callers may pass a user-entered
key to :meth:`FitroomConfig.resolve_api_key`; an explicit key always wins over
the configured one.  Nothing in the application reads the environment for a
key after start-up.

Global Configuration Instance
------------------------------
A global ``config`` instance is created automatically at module import time
and is used as the default by the pipeline and the web application.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class FitroomConfig(BaseSettings):
    """Main configuration for Fitroom.

    Attributes
    ----------
    Upstream Settings:
        api_key : str
            Default API key for the generative endpoint (empty = none configured)
        api_base_url : str
            Base URL of the generative-content API
        model_id : str
            Model identifier used in ``/models/<model_id>:generateContent``

    Retry Settings:
        max_retries : int
            Retries after the first attempt (2 means three attempts in total)
        retry_base_delay : float
            Linear backoff unit in seconds; attempt ``n`` waits ``base * (n + 1)``
        request_timeout : float | None
            Per-attempt timeout in seconds, ``None`` for no deadline

    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn (1024-65535)
        templates_dir : Path
            Directory holding ``index.html``

    Presentation:
        error_display_seconds : float
            How long a user-visible error stays on screen
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FITROOM_",
        case_sensitive=False,
    )

    # Upstream
    api_key: str = Field(
        default="",
        description="Default API key for the generative endpoint",
        repr=False,
    )
    api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the generative-content API",
    )
    model_id: str = Field(
        default="gemini-2.5-flash-image-preview",
        description="Model used for try-on generation",
    )

    # Retry policy
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_base_delay: float = Field(
        default=1.0,
        description="Linear backoff unit in seconds",
        ge=0.0,
    )
    request_timeout: float | None = Field(
        default=None,
        description="Per-attempt timeout in seconds (None = no deadline)",
    )

    # Server
    server_host: str = Field(default="0.0.0.0", description="Server bind address")
    server_port: int = Field(default=7860, ge=1024, le=65535)
    templates_dir: Path = Field(default=_PACKAGE_DIR / "templates")

    # Presentation
    error_display_seconds: float = Field(default=8.0, ge=0.0)

    @property
    def generate_url(self) -> str:
        """Full ``generateContent`` URL for the configured model."""
        return f"{self.api_base_url.rstrip('/')}/models/{self.model_id}:generateContent"

    def resolve_api_key(self, override: str | None = None) -> str:
        """Return the credential to use for a request.

        Args:
            override: User-supplied key.  Blank or ``None`` falls back to
                the configured ``api_key``.

        Returns:
            The stripped key, or an empty string when none is available.
        """
        if override and override.strip():
            return override.strip()
        return self.api_key.strip()


# Global configuration instance.
# Loads values from environment variables (FITROOM_* prefix) and .env file.
config = FitroomConfig()
