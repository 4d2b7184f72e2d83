"""
Render Router - URL/HTML to PDF endpoints.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse, Response

from ....config import settings
from ....errors import ProbeError, RenderError, ValidationError
from ....services.existing_pdf import resolve_existing_pdf_url
from ....services.options import normalize, options_from_query
from ....services.renderer import render_pdf

logger = logging.getLogger("url_to_pdf.api.render")

router = APIRouter(tags=["render"])


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header, with an RFC 5987 name for non-ASCII filenames."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'").replace("\\", "_")
    if fallback == filename:
        return f'attachment; filename="{fallback}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def decode_html_body(body: bytes, content_type: str) -> str:
    """
    Decode an HTML request body with the charset of its Content-Type, UTF-8 when none is given.

    Raises:
        ValidationError: If the charset is unknown or the body does not decode with it
    """
    charset = "utf-8"
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            charset = value.strip().strip('"')

    try:
        return body.decode(charset)
    except LookupError:
        raise ValidationError(f"Unsupported charset: {charset}")
    except UnicodeDecodeError:
        raise ValidationError(f"Body is not valid {charset}")


async def _existing_pdf_url(url: str) -> Optional[str]:
    try:
        return await resolve_existing_pdf_url(url)
    except ProbeError as e:
        if not settings.probe_failure_fallthrough:
            raise
        logger.warning(f"{e}; rendering the page instead")
        return None


async def _render_response(raw: Dict[str, Any]) -> Response:
    target = raw.get("url") or "inline HTML"
    try:
        opts = normalize(raw)

        if opts.url is not None:
            existing_pdf_url = await _existing_pdf_url(opts.url)
            if existing_pdf_url is not None:
                logger.info(f"Redirecting {opts.url} to existing PDF {existing_pdf_url}")
                return RedirectResponse(existing_pdf_url, status_code=302)

        data = await render_pdf(opts)

    except RenderError as e:
        logger.warning(f"Render error for {target}: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))

    except Exception as e:
        logger.exception(f"Unexpected error rendering {target}")
        raise HTTPException(status_code=500, detail=f"Internal error: {e}")

    headers = {}
    if opts.attachment_name:
        headers["Content-Disposition"] = content_disposition(opts.attachment_name)
    return Response(content=data, media_type="application/pdf", headers=headers)


@router.get("/render")
async def get_render(request: Request) -> Response:
    """
    Render the page given in the query string to PDF.

    Options are passed as query parameters, nested groups with dotted keys
    (``viewport.width``, ``pdf.margin.top``). Redirects when the URL already
    points at a PDF.
    """
    raw = options_from_query(request.query_params)
    if not isinstance(raw.get("url"), str):
        raise HTTPException(status_code=400, detail="url query parameter is required")
    return await _render_response(raw)


@router.post("/render")
async def post_render(request: Request) -> Response:
    """
    Render a URL or HTML to PDF.

    With ``Content-Type: application/json`` the body holds the options and
    must contain ``url`` or ``html``. Any other body is the HTML to render;
    options then come from the query string, which may not contain ``url``.
    """
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if media_type == "application/json":
        try:
            body = await request.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Body must contain url or html")
        has_url = isinstance(body.get("url"), str)
        has_html = isinstance(body.get("html"), str)
        if not (has_url or has_html):
            raise HTTPException(status_code=400, detail="Body must contain url or html")
        if has_url and has_html:
            raise HTTPException(status_code=400, detail="Body must contain either url or html, not both")
        raw = body
    else:
        if "url" in request.query_params:
            raise HTTPException(
                status_code=400,
                detail="url query parameter is not allowed when body is HTML",
            )
        raw = options_from_query(request.query_params)
        try:
            raw["html"] = decode_html_body(await request.body(), request.headers.get("content-type", ""))
        except ValidationError as e:
            raise HTTPException(status_code=e.status_code, detail=str(e))

    return await _render_response(raw)
