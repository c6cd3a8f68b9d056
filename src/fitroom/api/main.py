"""Fitroom — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, the REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
One shared :class:`~fitroom.core.pipeline.GenerationPipeline` holds the only
server-side state:

- **Configuration** comes from :data:`~fitroom.core.config.config` and is
  summarised for the frontend via ``GET /api/config``.
- **Generation** is delegated to the pipeline, created in the lifespan and
  stored on ``app.state``.  It runs one generation at a time; an overlapping
  ``POST /api/generate`` is rejected with 409.
- **Images** travel as base64 data URLs in both directions; nothing is
  written to disk.
- **Errors** raised by the pipeline are rendered by one exception handler
  as ``{"success": false, "error": ..., "error_type": ...}``.

Endpoints
---------
========  ========================  ====================================
Method    Path                      Purpose
========  ========================  ====================================
GET       ``/``                     Serve the main HTML page
GET       ``/api/config``           Model, fits, key status
POST      ``/api/prompt/compile``   Preview the compiled prompt
POST      ``/api/generate``         Generate a try-on image
========  ========================  ====================================

Usage
-----
CLI (installed entry point)::

    fitroom

Direct invocation::

    python -m fitroom.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from fitroom import __version__
from fitroom.api.models import GenerateRequest, GenerateResponse, PromptRequest
from fitroom.core.assets import ImageAsset
from fitroom.core.config import config
from fitroom.core.errors import FitroomError
from fitroom.core.pipeline import GenerationPipeline
from fitroom.core.prompt_builder import FitType, build_prompt

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the generation pipeline on startup and close it on shutdown.

    A pipeline already present on ``app.state`` (e.g. injected by tests) is
    reused.
    """
    if getattr(app.state, "pipeline", None) is None:
        app.state.pipeline = GenerationPipeline(config)
        logger.info(f"GenerationPipeline initialised for model {config.model_id}.")

    yield

    await app.state.pipeline.aclose()
    logger.info("GenerationPipeline closed on shutdown.")


app = FastAPI(
    title="Fitroom",
    description="Virtual try-on through a generative image model.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FitroomError)
async def fitroom_error_handler(request: Request, exc: FitroomError) -> JSONResponse:
    """Render a pipeline error as a single user-facing message."""
    logger.warning(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.user_message,
            "error_type": type(exc).__name__,
        },
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the main application HTML page.

    Raises:
        HTTPException: 404 if ``index.html`` is not found.
    """
    index_path = config.templates_dir / "index.html"
    if index_path.exists():
        return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
    raise HTTPException(status_code=404, detail="index.html not found")


@app.get("/api/config")
async def get_config() -> dict:
    """Return what the frontend needs to render its controls.

    The API key itself is never returned, only whether one is configured.
    """
    return {
        "version": __version__,
        "model_id": config.model_id,
        "fits": [fit.value for fit in FitType],
        "default_fit": FitType.REGULAR.value,
        "api_key_configured": bool(config.resolve_api_key()),
        "error_display_seconds": config.error_display_seconds,
    }


@app.post("/api/prompt/compile")
async def compile_prompt(req: PromptRequest) -> dict:
    """Preview the compiled prompt without generating an image."""
    return {"compiled_prompt": build_prompt(req.to_options())}


@app.post("/api/generate", response_model=GenerateResponse)
async def generate_tryon(
    req: GenerateRequest,
    request: Request,
    x_api_key: str | None = Header(default=None),
) -> GenerateResponse:
    """Generate a try-on image.

    This endpoint:

    1. Decodes both data URLs into image assets (non-images are rejected).
    2. Resolves the credential: body ``api_key``, then ``X-Api-Key``
       header, then the server default.
    3. Runs the pipeline (bounded retries, error classification).

    Raises:
        FitroomError: Rendered by :func:`fitroom_error_handler`.
    """
    person = ImageAsset.from_data_url(req.person_image) if req.person_image else None
    garment = ImageAsset.from_data_url(req.garment_image) if req.garment_image else None

    pipeline: GenerationPipeline = request.app.state.pipeline
    result = await pipeline.generate(
        person,
        garment,
        req.to_options(),
        api_key=req.api_key or x_api_key,
    )

    return GenerateResponse(
        image=result.data_url,
        mime_type=result.image.mime_type,
        compiled_prompt=result.prompt,
        model_id=result.model_id,
    )


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Host and port come from ``FITROOM_SERVER_HOST`` and
    ``FITROOM_SERVER_PORT`` (default ``0.0.0.0:7860``).
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Launching Fitroom on {config.server_host}:{config.server_port}")
    uvicorn.run(
        "fitroom.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
