"""
Render Service Pydantic Models.

Rendering options accepted by the API and the response models for the
system endpoints. Options use camelCase names on the wire (query string and
JSON body) and snake_case attributes in Python.
"""

import re
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_NUMBER_PATTERN = re.compile(r"^\d+(\.\d+)?$")


class OptionsModel(BaseModel):
    """Base for every options group: immutable, camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ViewportOptions(OptionsModel):
    """Browser viewport applied before navigation."""

    width: Optional[int] = Field(default=None, description="Viewport width in pixels")
    height: Optional[int] = Field(default=None, description="Viewport height in pixels")
    device_scale_factor: Optional[float] = Field(default=None, description="Device pixel ratio")
    is_mobile: Optional[bool] = Field(default=None, description="Emulate a mobile device")
    has_touch: Optional[bool] = Field(default=None, description="Enable touch events")
    is_landscape: Optional[bool] = Field(default=None, description="Report a landscape screen")


class GotoOptions(OptionsModel):
    """Navigation completion policy."""

    timeout: Optional[int] = Field(default=None, description="Navigation timeout in ms")
    wait_until: Optional[str] = Field(
        default=None,
        description="Load state that ends navigation: load, domcontentloaded, networkidle, commit",
    )
    network_idle_inflight: Optional[int] = Field(
        default=None,
        description="Maximum inflight requests still counted as idle; accepted but not forwarded, Playwright's networkidle allows none",
    )
    network_idle_timeout: Optional[int] = Field(
        default=None,
        description="Idle duration in ms that counts as network idle; accepted but not forwarded, Playwright's networkidle waits a fixed 500ms",
    )


class MarginOptions(OptionsModel):
    """PDF page margins (CSS units or pixels)."""

    top: Optional[Union[str, float]] = None
    right: Optional[Union[str, float]] = None
    bottom: Optional[Union[str, float]] = None
    left: Optional[Union[str, float]] = None


class PdfOptions(OptionsModel):
    """PDF export policy."""

    scale: Optional[float] = Field(default=None, description="Rendering scale of the page")
    display_header_footer: Optional[bool] = Field(default=None, description="Print header and footer")
    landscape: Optional[bool] = Field(default=None, description="Landscape paper orientation")
    page_ranges: Optional[str] = Field(default=None, description="Pages to print, e.g. '1-5, 8'")
    format: Optional[str] = Field(default=None, description="Paper format, e.g. A4 or Letter")
    width: Optional[Union[str, float]] = Field(default=None, description="Paper width")
    height: Optional[Union[str, float]] = Field(default=None, description="Paper height")
    margin: MarginOptions = Field(default_factory=MarginOptions)
    print_background: Optional[bool] = Field(default=None, description="Print background graphics")


class RenderOptions(OptionsModel):
    """Complete configuration for one render call."""

    url: Optional[str] = Field(default=None, description="URL to render")
    html: Optional[str] = Field(default=None, description="Inline HTML to render when no URL is given")
    attachment_name: Optional[str] = Field(
        default=None,
        description="Filename suggested in the Content-Disposition header",
    )
    scroll_page: bool = Field(default=False, description="Scroll through the page before export")
    emulate_screen_media: bool = Field(default=False, description="Use screen instead of print CSS")
    ignore_https_errors: bool = Field(default=False, description="Ignore TLS certificate errors")
    wait_for: Optional[Union[float, str]] = Field(
        default=None,
        description="Delay in ms before navigation, or a CSS selector to wait for",
    )
    viewport: ViewportOptions = Field(default_factory=ViewportOptions)
    goto: GotoOptions = Field(default_factory=GotoOptions)
    pdf: PdfOptions = Field(default_factory=PdfOptions)

    @field_validator("wait_for", mode="before")
    @classmethod
    def coerce_numeric_wait(cls, v):
        # Query strings deliver numbers as text
        if isinstance(v, str) and _NUMBER_PATTERN.match(v.strip()):
            return float(v)
        return v


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy", description="Service status")
    browser_ready: bool = Field(..., description="Whether the browser has been launched")
    active_contexts: int = Field(..., description="Browser contexts currently rendering")
