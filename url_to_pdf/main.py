"""
URL to PDF Rendering Service - FastAPI Application.

Renders web pages or raw HTML to PDF with a headless Chromium driven by
Playwright. URLs that already point at a PDF are answered with a redirect.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings
from .services.browser_pool import browser_pool
from .api.v1.routers import render as render_router
from .api.v1.routers import system as system_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("url_to_pdf.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Launch the shared browser on startup and close it on shutdown."""
    logger.info("Starting URL to PDF Rendering Service")
    await browser_pool.initialize()
    yield
    logger.info("Shutting down URL to PDF Rendering Service")
    await browser_pool.shutdown()


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application
    """
    config = config or settings

    application = FastAPI(
        title=config.api_title,
        version=config.api_version,
        debug=config.debug,
        openapi_url="/api/v1/openapi.json",
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_credentials,
        allow_methods=config.cors_methods,
        allow_headers=config.cors_headers,
    )

    @application.middleware("http")
    async def request_logging_middleware(request: Request, call_next: Any) -> Response:
        """Tag every request with an X-Request-ID and log its outcome."""
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        start_time = time.time()

        response = await call_next(request)

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "[%s] %s %s -> %d (%dms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        response.headers["X-Request-ID"] = request_id
        return response

    # Versioned API plus root-level aliases for health checks and /render clients
    for prefix in ("/api/v1", ""):
        application.include_router(system_router.router, prefix=prefix)
        application.include_router(render_router.router, prefix=prefix)

    return application


app = create_app()
