"""
Tests for the browser pool lifecycle with Playwright mocked out.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from url_to_pdf.models import ViewportOptions
from url_to_pdf.services.browser_pool import BrowserPool


@pytest.fixture
def playwright_starter():
    """Patch async_playwright().start() to return a mocked Playwright with a mocked Chromium."""
    browser = AsyncMock()
    playwright = AsyncMock()
    playwright.chromium.launch.return_value = browser
    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    with patch("url_to_pdf.services.browser_pool.async_playwright", return_value=starter):
        yield playwright, browser


class TestBrowserPool:

    @pytest.mark.asyncio
    async def test_initialize_launches_once(self, playwright_starter):
        playwright, browser = playwright_starter
        pool = BrowserPool(headless=True, args=["--no-sandbox"])

        await pool.initialize()
        await pool.initialize()

        playwright.chromium.launch.assert_awaited_once_with(headless=True, args=["--no-sandbox"])
        assert pool.is_initialized is True

    @pytest.mark.asyncio
    async def test_shutdown_closes_browser_and_playwright(self, playwright_starter):
        playwright, browser = playwright_starter
        pool = BrowserPool()
        await pool.initialize()

        await pool.shutdown()

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert pool.is_initialized is False

    @pytest.mark.asyncio
    async def test_get_context_launches_lazily_and_counts(self, playwright_starter):
        playwright, browser = playwright_starter
        pool = BrowserPool()

        context = await pool.get_context(ViewportOptions(width=800, height=600), ignore_https_errors=True)

        browser.new_context.assert_awaited_once_with(
            viewport={"width": 800, "height": 600},
            ignore_https_errors=True,
        )
        assert pool.active_contexts == 1

        await pool.release_context(context)

        context.close.assert_awaited_once()
        assert pool.active_contexts == 0
