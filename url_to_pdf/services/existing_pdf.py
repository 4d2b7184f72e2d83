"""
Existing PDF Resolver.

Decides whether a URL already points at a PDF so the service can redirect to
it instead of printing the page. Checks run cheapest first:

1. ``.pdf`` file extension
2. Known sites whose article pages have a canonical PDF URL (arXiv, OpenReview)
3. HEAD request and content-type inspection
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple
from urllib.parse import SplitResult, urlsplit, urlunsplit

import httpx

from ..config import settings
from ..errors import ProbeError, ValidationError

logger = logging.getLogger("url_to_pdf.existing_pdf")

_ARXIV_ID_PATTERN = re.compile(r"^/(abs|pdf)/(\d+\.\d+)")


@dataclass(frozen=True)
class SiteRule:
    """Rewrites URLs of one host to the host's PDF URL; returns None when the path does not apply."""

    hostname: str
    rewrite: Callable[[SplitResult], Optional[str]]


def _arxiv_pdf_url(parts: SplitResult) -> Optional[str]:
    match = _ARXIV_ID_PATTERN.match(parts.path)
    if match is None:
        return None
    return f"https://arxiv.org/pdf/{match.group(2)}"


def _openreview_pdf_url(parts: SplitResult) -> Optional[str]:
    if parts.path not in ("/forum", "/pdf"):
        return None
    return urlunsplit(parts._replace(path="/pdf"))


# Tried in order; pass ``rules=`` to resolve_existing_pdf_url to extend or replace
DEFAULT_SITE_RULES: Tuple[SiteRule, ...] = (
    SiteRule(hostname="arxiv.org", rewrite=_arxiv_pdf_url),
    SiteRule(hostname="openreview.net", rewrite=_openreview_pdf_url),
)


def _split_url(url: str) -> Tuple[SplitResult, Optional[str]]:
    try:
        parts = urlsplit(url)
        return parts, parts.hostname
    except ValueError:
        raise ValidationError(f"Invalid url: {url}")


def match_site_rules(url: str, rules: Sequence[SiteRule]) -> Optional[str]:
    """
    Return the PDF URL of the first rule that rewrites ``url``, if any.

    Raises:
        ValidationError: If ``url`` cannot be parsed
    """
    parts, hostname = _split_url(url)
    for rule in rules:
        if rule.hostname != hostname:
            continue
        pdf_url = rule.rewrite(parts)
        if pdf_url is not None:
            return pdf_url
    return None


async def probe_content_type(url: str, client: httpx.AsyncClient) -> Optional[str]:
    """
    Fetch the content type of ``url`` with a HEAD request.

    Raises:
        ProbeError: If the request cannot be completed
    """
    try:
        response = await client.head(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise ProbeError(f"Could not check content type of {url}: {e}")
    return response.headers.get("content-type")


async def resolve_existing_pdf_url(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    rules: Optional[Sequence[SiteRule]] = None,
) -> Optional[str]:
    """
    Get the URL of an existing PDF for ``url``.

    Args:
        url: Requested page URL
        client: HTTP client for the HEAD probe; a short-lived one is created when omitted
        rules: Site rules to apply, defaults to DEFAULT_SITE_RULES

    Returns:
        URL of the PDF, or None when the page has to be rendered

    Raises:
        ValidationError: If ``url`` cannot be parsed
        ProbeError: If the HEAD probe fails
    """
    if url.endswith(".pdf"):
        logger.info(f"Recognized PDF extension of: {url}")
        return url

    pdf_url = match_site_rules(url, DEFAULT_SITE_RULES if rules is None else rules)
    if pdf_url is not None:
        logger.info(f"Found known PDF location {pdf_url} for {url}")
        return pdf_url

    if client is None:
        async with httpx.AsyncClient(
            timeout=settings.probe_timeout_seconds,
            follow_redirects=True,
        ) as probe_client:
            content_type = await probe_content_type(url, probe_client)
    else:
        content_type = await probe_content_type(url, client)

    if content_type and content_type.lower().endswith("pdf"):
        logger.info(f"Recognized PDF content-type: {content_type} in {url}")
        return url
    return None
