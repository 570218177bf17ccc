"""ColorIA — FastAPI Application.

This module is the single entry point for the web application.  It builds
the FastAPI ``app`` through :func:`create_app`, defines the REST routes,
and provides the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :class:`~coloria.core.config.ColoriaConfig`
  (``COLORIA_*`` environment variables).
- **Image generation** is proxied to the third-party generation service
  by :class:`~coloria.core.generation.GenerationClient`.
- **Saved images** live in a SQLite file behind
  :class:`~coloria.core.library_db.LibraryDB`; their bytes are written by
  :class:`~coloria.core.asset_store.AssetStore` and served from
  ``/assets`` by FastAPI's ``StaticFiles``.
- **The user interface** is the Gradio Blocks app from
  :mod:`coloria.ui.app`, mounted at ``/``.

Endpoints
---------
========  ==================  ========================================
Method    Path                Purpose
========  ==================  ========================================
GET       ``/api/health``     Liveness check and version
POST      ``/api/generate``   Generate one image from a prompt
GET       ``/assets/...``     Saved image assets
GET       ``/``               Gradio UI (when mounted)
========  ==================  ========================================

Usage
-----
CLI (installed entry point)::

    coloria

Direct invocation::

    python -m coloria.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from coloria import __version__
from coloria.api.models import ErrorResponse, GenerateRequest, GenerateResponse, HealthResponse
from coloria.core.config import ColoriaConfig, config
from coloria.core.errors import (
    AuthenticationError,
    ColoriaError,
    GenerationError,
    TransportError,
    ValidationError,
)
from coloria.core.services import AppServices, build_services
from coloria.ui.state import set_services

logger = logging.getLogger(__name__)


def error_status(exc: ColoriaError) -> int:
    """Map an error from the taxonomy to an HTTP status code."""
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, GenerationError):
        return exc.status_code
    if isinstance(exc, TransportError):
        return 502
    return 500


async def coloria_error_handler(request: Request, exc: ColoriaError) -> JSONResponse:
    """Render any :class:`ColoriaError` as ``{"error": message}``."""
    status_code = error_status(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Keep malformed request bodies in the same ``{"error": ...}`` shape."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Invalid request body").model_dump(),
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def create_app(cfg: ColoriaConfig = config, mount_ui: bool = True) -> FastAPI:
    """Build the FastAPI application.

    Args:
        cfg: Configuration to build services from
        mount_ui: Mount the Gradio UI at ``/``.  Tests pass ``False``.

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build the shared services on startup and share them with the UI.

        Args:
            app: The FastAPI application instance.

        Yields:
            Control back to the application for the duration of its lifetime.
        """
        # --- Startup -------------------------------------------------------
        app.state.services = build_services(cfg)
        set_services(app.state.services)
        logger.info("Shared services initialised.")

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        set_services(None)
        logger.info("Shared services released on shutdown.")

    app = FastAPI(
        title="ColorIA",
        description="Generate images from text prompts and manage a personal library.",
        version=__version__,
        lifespan=lifespan,
    )

    # Allow cross-origin requests so a separately served frontend can call
    # the API during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ColoriaError, coloria_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Public URLs produced by AssetStore point here.
    app.mount("/assets", StaticFiles(directory=str(cfg.assets_dir)), name="assets")

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__)

    @app.post(
        "/api/generate",
        response_model=GenerateResponse,
        response_model_by_alias=True,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def generate(req: GenerateRequest, request: Request) -> GenerateResponse:
        """Generate one image from ``req.prompt``.

        Returns:
            ``{"imageUrl": ...}`` on success.  Failures are rendered by the
            :class:`ColoriaError` handler as ``{"error": ...}``.
        """
        services = get_services(request)
        async with services.http_client() as client:
            image_url = await services.generation.generate(req.prompt, client=client)
        return GenerateResponse(image_url=image_url)

    if mount_ui:
        import gradio as gr

        from coloria.ui.app import PAGE_SCRIPT, create_ui

        blocks, custom_css = create_ui()
        app = gr.mount_gradio_app(
            app,
            blocks,
            path="/",
            allowed_paths=[str(cfg.downloads_dir), str(cfg.assets_dir)],
            css=custom_css,
            head=PAGE_SCRIPT,
        )

    return app


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~coloria.core.config.config` (which
    loads from ``COLORIA_SERVER_HOST`` and ``COLORIA_SERVER_PORT``
    environment variables).  Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``coloria`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "coloria.api.main:create_app",
        factory=True,
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
