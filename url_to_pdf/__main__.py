"""
Service entrypoint - runs uvicorn server.
"""

import uvicorn

from .config import settings
from .main import app


def main() -> None:
    """Run the rendering service."""
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
