"""
Tests for existing PDF detection.

All HTTP traffic goes through httpx.MockTransport; no network access.
"""

import httpx
import pytest

from url_to_pdf.errors import ProbeError, ValidationError
from url_to_pdf.services.existing_pdf import (
    DEFAULT_SITE_RULES,
    SiteRule,
    match_site_rules,
    resolve_existing_pdf_url,
)


def make_client(requests, content_type=None, error=None):
    """AsyncClient answering HEAD requests with ``content_type`` and recording them."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if error is not None:
            raise error(f"probe failed for {request.url}", request=request)
        headers = {"content-type": content_type} if content_type else {}
        return httpx.Response(200, headers=headers)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# EXTENSION AND KNOWN SITE TESTS
# =============================================================================


class TestShortCircuits:
    """Checks that resolve without any network call."""

    @pytest.mark.asyncio
    async def test_pdf_extension_returns_url_without_request(self):
        requests = []
        async with make_client(requests, content_type="text/html") as client:
            result = await resolve_existing_pdf_url("https://example.com/doc.pdf", client=client)

        assert result == "https://example.com/doc.pdf"
        assert requests == []

    @pytest.mark.asyncio
    async def test_arxiv_abstract_rewritten_to_pdf(self):
        requests = []
        async with make_client(requests) as client:
            result = await resolve_existing_pdf_url("https://arxiv.org/abs/2101.00001", client=client)

        assert result == "https://arxiv.org/pdf/2101.00001"
        assert requests == []

    @pytest.mark.asyncio
    async def test_arxiv_pdf_path_with_version_suffix(self):
        requests = []
        async with make_client(requests) as client:
            result = await resolve_existing_pdf_url("https://arxiv.org/pdf/1706.03762v5", client=client)

        assert result == "https://arxiv.org/pdf/1706.03762"

    @pytest.mark.asyncio
    async def test_openreview_forum_rewritten_keeping_query(self):
        requests = []
        async with make_client(requests) as client:
            result = await resolve_existing_pdf_url("https://openreview.net/forum?id=abc", client=client)

        assert result == "https://openreview.net/pdf?id=abc"
        assert requests == []


class TestSiteRules:
    """Tests for the site rule registry."""

    def test_unmatched_path_on_known_host_falls_through(self):
        assert match_site_rules("https://arxiv.org/list/cs.LG/recent", DEFAULT_SITE_RULES) is None
        assert match_site_rules("https://openreview.net/group?id=ICLR", DEFAULT_SITE_RULES) is None

    def test_unknown_host_not_matched(self):
        assert match_site_rules("https://example.org/abs/2101.00001", DEFAULT_SITE_RULES) is None

    def test_custom_rule_applies_in_order(self):
        rules = [
            SiteRule(hostname="papers.test", rewrite=lambda parts: None),
            SiteRule(hostname="papers.test", rewrite=lambda parts: f"https://papers.test/pdf{parts.path}"),
        ]
        assert match_site_rules("https://papers.test/42", rules) == "https://papers.test/pdf/42"

    @pytest.mark.asyncio
    async def test_custom_rules_replace_defaults(self):
        requests = []
        async with make_client(requests, content_type="text/html") as client:
            result = await resolve_existing_pdf_url(
                "https://arxiv.org/abs/2101.00001", client=client, rules=[]
            )

        assert result is None
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_custom_rules_extend_defaults(self):
        papers = SiteRule(hostname="papers.test", rewrite=lambda parts: "https://papers.test/paper.pdf")
        rules = (*DEFAULT_SITE_RULES, papers)
        requests = []
        async with make_client(requests) as client:
            custom = await resolve_existing_pdf_url("https://papers.test/42", client=client, rules=rules)
            arxiv = await resolve_existing_pdf_url("https://arxiv.org/abs/2101.00001", client=client, rules=rules)

        assert custom == "https://papers.test/paper.pdf"
        assert arxiv == "https://arxiv.org/pdf/2101.00001"
        assert requests == []
        assert len(DEFAULT_SITE_RULES) == 2

    def test_default_rules_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_SITE_RULES.append(SiteRule(hostname="papers.test", rewrite=lambda parts: None))

    @pytest.mark.asyncio
    async def test_malformed_url_rejected_without_request(self):
        requests = []
        async with make_client(requests) as client:
            with pytest.raises(ValidationError) as exc_info:
                await resolve_existing_pdf_url("http://[bad/page", client=client)

        assert exc_info.value.status_code == 400
        assert requests == []


# =============================================================================
# CONTENT TYPE PROBE TESTS
# =============================================================================


class TestContentTypeProbe:
    """Tests for the HEAD request fallback."""

    @pytest.mark.asyncio
    async def test_html_content_type_returns_none(self):
        requests = []
        async with make_client(requests, content_type="text/html; charset=utf-8") as client:
            result = await resolve_existing_pdf_url("https://example.com/page", client=client)

        assert result is None
        assert len(requests) == 1
        assert requests[0].method == "HEAD"

    @pytest.mark.asyncio
    async def test_pdf_content_type_returns_url(self):
        requests = []
        async with make_client(requests, content_type="Application/PDF") as client:
            result = await resolve_existing_pdf_url("https://example.com/download?id=7", client=client)

        assert result == "https://example.com/download?id=7"

    @pytest.mark.asyncio
    async def test_uppercase_extension_is_probed(self):
        requests = []
        async with make_client(requests, content_type="application/pdf") as client:
            result = await resolve_existing_pdf_url("https://example.com/DOC.PDF", client=client)

        assert result == "https://example.com/DOC.PDF"
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_missing_content_type_returns_none(self):
        requests = []
        async with make_client(requests) as client:
            result = await resolve_existing_pdf_url("https://example.com/page", client=client)

        assert result is None

    @pytest.mark.asyncio
    async def test_network_failure_raises_probe_error(self):
        requests = []
        async with make_client(requests, error=httpx.ConnectError) as client:
            with pytest.raises(ProbeError) as exc:
                await resolve_existing_pdf_url("https://unreachable.test/page", client=client)

        assert exc.value.status_code == 502
        assert "unreachable.test" in str(exc.value)
