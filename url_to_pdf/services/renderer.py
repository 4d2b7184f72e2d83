"""
PDF Renderer Service.

Drives one browser context through navigation, optional scroll-through and
PDF export.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from ..config import settings
from ..errors import ExportError, NavigationError, RenderError, ScrollTimeout
from ..models import PdfOptions, RenderOptions
from .browser_pool import BrowserPool, browser_pool

logger = logging.getLogger("url_to_pdf.renderer")

# Puppeteer load states that Playwright folds into "networkidle"
WAIT_UNTIL_ALIASES = {
    "networkidle0": "networkidle",
    "networkidle2": "networkidle",
}

SCROLL_INTERVAL_MS = 200
SCROLL_VIEWPORT_MARGIN_PX = 400
SCROLL_BOTTOM_THRESHOLD_PX = 400
SCROLL_SETTLE_MS = 500
SCROLL_TIMEOUT_MS = 30000

# Scrolls one step and returns the distance left to the document bottom
_SCROLL_STEP_SCRIPT = """(margin) => {
    window.scrollBy(0, window.innerHeight - margin);
    const bottom = window.pageYOffset + window.innerHeight;
    return document.body.scrollHeight - bottom;
}"""

_SCROLL_TOP_SCRIPT = "() => window.scrollTo(0, 0)"


@dataclass(frozen=True)
class ScrollResult:
    """Outcome of a scroll-through."""

    completed: bool
    steps: int


async def _scroll_to_top_and_settle(page: Page, settle_ms: int) -> None:
    await page.evaluate(_SCROLL_TOP_SCRIPT)
    await asyncio.sleep(settle_ms / 1000)


async def scroll_page(
    page: Page,
    interval_ms: int = SCROLL_INTERVAL_MS,
    viewport_margin_px: int = SCROLL_VIEWPORT_MARGIN_PX,
    bottom_threshold_px: int = SCROLL_BOTTOM_THRESHOLD_PX,
    settle_ms: int = SCROLL_SETTLE_MS,
    timeout_ms: int = SCROLL_TIMEOUT_MS,
) -> ScrollResult:
    """
    Scroll to the end of the page to trigger "appear in viewport" effects.

    Scrolls down by the viewport height minus ``viewport_margin_px`` every
    ``interval_ms`` until less than ``bottom_threshold_px`` is left below the
    viewport, then jumps back to the top and waits ``settle_ms``.

    Args:
        page: Page to scroll
        interval_ms: Pause between scroll steps
        viewport_margin_px: Overlap kept between consecutive steps
        bottom_threshold_px: Remaining distance that counts as the bottom
        settle_ms: Wait after returning to the top
        timeout_ms: Deadline for the whole scroll-through

    Returns:
        ScrollResult; ``completed`` is False when the deadline passed first
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_ms / 1000
    steps = 0

    while loop.time() < deadline:
        try:
            remaining = await asyncio.wait_for(
                page.evaluate(_SCROLL_STEP_SCRIPT, viewport_margin_px),
                timeout=deadline - loop.time(),
            )
        except asyncio.TimeoutError:
            break
        steps += 1

        if remaining < bottom_threshold_px:
            try:
                await asyncio.wait_for(
                    _scroll_to_top_and_settle(page, settle_ms),
                    timeout=max(deadline - loop.time(), 0),
                )
            except asyncio.TimeoutError:
                break
            logger.debug(f"Scrolled to page end in {steps} steps")
            return ScrollResult(completed=True, steps=steps)

        await asyncio.sleep(interval_ms / 1000)

    return ScrollResult(completed=False, steps=steps)


def pdf_options(pdf: PdfOptions) -> Dict[str, Any]:
    """Map the PDF export policy to Playwright page.pdf keyword arguments."""
    options = {
        "scale": pdf.scale,
        "display_header_footer": pdf.display_header_footer,
        "landscape": pdf.landscape,
        "page_ranges": pdf.page_ranges,
        "format": pdf.format,
        "width": pdf.width,
        "height": pdf.height,
        "print_background": pdf.print_background,
    }
    options = {key: value for key, value in options.items() if value is not None}

    margin = pdf.margin.model_dump(exclude_none=True)
    if margin:
        options["margin"] = margin
    return options


async def _navigate(page: Page, opts: RenderOptions) -> None:
    target = opts.url if opts.html is None else "inline HTML"
    timeout = opts.goto.timeout if opts.goto.timeout is not None else settings.default_timeout_ms
    wait_until = WAIT_UNTIL_ALIASES.get(opts.goto.wait_until, opts.goto.wait_until)

    logger.info(f"Navigating to {target}")

    try:
        if opts.html is not None:
            await page.set_content(opts.html, timeout=timeout, wait_until=wait_until)
        else:
            await page.goto(opts.url, timeout=timeout, wait_until=wait_until)
    except PlaywrightTimeout:
        raise NavigationError(f"Page load timeout after {timeout}ms: {target}", status_code=504)
    except PlaywrightError as e:
        raise NavigationError(f"Failed to load {target}: {e}", status_code=502)

    if isinstance(opts.wait_for, str):
        logger.debug(f"Waiting for selector: {opts.wait_for}")
        try:
            await page.wait_for_selector(opts.wait_for, timeout=timeout)
        except PlaywrightTimeout:
            raise NavigationError(
                f"Selector '{opts.wait_for}' not found within {timeout}ms: {target}",
                status_code=504,
            )
        except PlaywrightError as e:
            raise NavigationError(f"Waiting for '{opts.wait_for}' failed: {e}", status_code=502)


async def render_pdf(opts: RenderOptions, pool: BrowserPool = browser_pool) -> bytes:
    """
    Render a URL or inline HTML to PDF.

    This function:
    1. Creates a browser context with the requested viewport
    2. Switches to screen media if requested
    3. Waits a fixed delay when ``wait_for`` is a number
    4. Navigates (or loads the HTML) and waits for a ``wait_for`` selector
    5. Scrolls through the page if requested
    6. Prints the page to PDF
    7. Closes the context, whatever happened before

    Args:
        opts: Normalized render options with exactly one of url/html set

    Returns:
        PDF bytes

    Raises:
        NavigationError: If the page does not load
        ScrollTimeout: If the scroll-through does not finish in time
        ExportError: If printing to PDF fails
        RenderError: For any other browser failure
    """
    start_time = time.time()
    context: Optional[BrowserContext] = None

    try:
        context = await pool.get_context(
            viewport=opts.viewport,
            ignore_https_errors=opts.ignore_https_errors,
        )
        page: Page = await context.new_page()

        if opts.emulate_screen_media:
            await page.emulate_media(media="screen")

        if isinstance(opts.wait_for, (int, float)):
            await page.wait_for_timeout(opts.wait_for)

        await _navigate(page, opts)

        if opts.scroll_page:
            result = await scroll_page(page)
            if not result.completed:
                raise ScrollTimeout(
                    f"Scrolling did not reach the page end within {SCROLL_TIMEOUT_MS}ms "
                    f"({result.steps} steps)"
                )

        try:
            data = await page.pdf(**pdf_options(opts.pdf))
        except PlaywrightError as e:
            raise ExportError(f"PDF export failed: {e}")

        render_time_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Generated PDF: {len(data)} bytes in {render_time_ms}ms")
        return data

    except RenderError:
        raise
    except Exception as e:
        logger.exception("Unexpected error while rendering")
        raise RenderError(f"Failed to render: {e}", status_code=500)

    finally:
        if context:
            await pool.release_context(context)
