import os
from unittest.mock import AsyncMock

import pytest

# Keep settings deterministic regardless of the developer's .env
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DEFAULT_TIMEOUT_MS", "30000")
os.environ.setdefault("PROBE_FAILURE_FALLTHROUGH", "false")


@pytest.fixture
def page():
    """Mocked Playwright page that prints a tiny PDF."""
    page = AsyncMock()
    page.pdf.return_value = b"%PDF-1.4 test"
    # Scroll steps report the document bottom as already reached
    page.evaluate.return_value = 0
    return page


@pytest.fixture
def context(page):
    """Mocked browser context handing out ``page``."""
    context = AsyncMock()
    context.new_page.return_value = page
    return context


@pytest.fixture
def browser(context):
    browser = AsyncMock()
    browser.new_context.return_value = context
    return browser


@pytest.fixture
def pool(browser):
    """BrowserPool wired to the mocked browser, skipping the Chromium launch."""
    from url_to_pdf.services.browser_pool import BrowserPool

    pool = BrowserPool()
    pool._browser = browser
    pool._initialized = True
    return pool


@pytest.fixture
def client():
    # Import lazily so env defaults apply before settings load; no lifespan, so no browser launch
    from fastapi.testclient import TestClient
    from url_to_pdf.main import app

    return TestClient(app)
