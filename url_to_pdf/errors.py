"""
Render pipeline errors.

Every error carries the HTTP status the API answers with.
"""


class RenderError(Exception):
    """Raised when a render request fails."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(RenderError):
    """Malformed or contradictory request input."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class NavigationError(RenderError):
    """Page navigation failed or timed out."""


class ScrollTimeout(RenderError):
    """The scroll-through did not reach the page bottom in time."""

    def __init__(self, message: str):
        super().__init__(message, status_code=504)


class ProbeError(RenderError):
    """The HEAD request used to detect an existing PDF failed."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class ExportError(RenderError):
    """The browser failed to print the page to PDF."""
