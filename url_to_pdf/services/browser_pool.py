"""
Browser Pool Service.

Owns the shared Chromium instance and hands out one isolated browser context
per render request. Handles browser lifecycle, context creation and cleanup.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Playwright

from ..config import settings
from ..models import ViewportOptions

logger = logging.getLogger("url_to_pdf.browser_pool")


class BrowserPool:
    """
    Manages the Chromium browser used for rendering.

    One browser process is launched on startup and shared. Each render request
    gets a fresh browser context so cookies, storage and viewport settings never
    leak between requests.
    """

    def __init__(self, headless: bool = True, args: Optional[List[str]] = None):
        self.headless = headless
        self.args = list(args or [])
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._active_contexts: int = 0
        self._lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self) -> None:
        """Launch the browser."""
        async with self._lock:
            if self._initialized:
                return

            logger.info(f"Launching Chromium (headless={self.headless})")

            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.args,
            )

            self._initialized = True
            logger.info("Browser launched successfully")

    async def shutdown(self) -> None:
        """Close the browser and release resources."""
        async with self._lock:
            if not self._initialized:
                return

            logger.info("Shutting down browser")

            if self._browser:
                await self._browser.close()
                self._browser = None

            if self._playwright:
                await self._playwright.stop()
                self._playwright = None

            self._initialized = False
            logger.info("Browser shut down")

    async def get_context(
        self,
        viewport: ViewportOptions,
        ignore_https_errors: bool = False,
    ) -> BrowserContext:
        """
        Get a fresh browser context for rendering.

        Each context is isolated and must be passed to release_context after use.

        Args:
            viewport: Viewport size and device emulation flags
            ignore_https_errors: Accept invalid TLS certificates

        Returns:
            BrowserContext for page rendering
        """
        if not self._initialized:
            await self.initialize()

        context = await self._browser.new_context(
            **context_options(viewport),
            ignore_https_errors=ignore_https_errors,
        )

        async with self._lock:
            self._active_contexts += 1

        return context

    async def release_context(self, context: BrowserContext) -> None:
        """
        Release a browser context.

        Args:
            context: BrowserContext to close
        """
        try:
            await context.close()
        except Exception as e:
            logger.warning(f"Error closing browser context: {e}")
        finally:
            async with self._lock:
                self._active_contexts = max(0, self._active_contexts - 1)

    @property
    def active_contexts(self) -> int:
        """Number of currently active browser contexts."""
        return self._active_contexts

    @property
    def is_initialized(self) -> bool:
        """Whether the browser has been launched."""
        return self._initialized


def context_options(viewport: ViewportOptions) -> Dict[str, Any]:
    """
    Map viewport options to Playwright new_context keyword arguments.

    Playwright has no landscape flag; a landscape viewport is reported
    through a screen whose width exceeds its height.
    """
    options: Dict[str, Any] = {}
    if viewport.width is not None and viewport.height is not None:
        options["viewport"] = {"width": viewport.width, "height": viewport.height}
        if viewport.is_landscape:
            options["screen"] = {
                "width": max(viewport.width, viewport.height),
                "height": min(viewport.width, viewport.height),
            }
    if viewport.device_scale_factor is not None:
        options["device_scale_factor"] = viewport.device_scale_factor
    if viewport.is_mobile is not None:
        options["is_mobile"] = viewport.is_mobile
    if viewport.has_touch is not None:
        options["has_touch"] = viewport.has_touch
    return options


# Singleton instance
browser_pool = BrowserPool(
    headless=settings.browser_headless,
    args=settings.browser_args,
)
