"""
Render Service Configuration.

Environment-driven settings for the URL/HTML to PDF rendering service.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # =========================================================================
    # API SETTINGS
    # =========================================================================
    api_title: str = "URL to PDF Rendering Service"
    api_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable verbose logging")
    host: str = Field(default="0.0.0.0", description="Bind address for the server")
    port: int = Field(default=9000, description="Bind port for the server")

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed origins for CORS",
    )
    cors_credentials: bool = True
    cors_methods: List[str] = ["*"]
    cors_headers: List[str] = ["*"]

    # =========================================================================
    # BROWSER SETTINGS
    # =========================================================================
    browser_headless: bool = Field(
        default=True,
        description="Run the browser in headless mode",
    )
    browser_args: List[str] = Field(
        default=[
            "--disable-gpu",
            "--disable-dev-shm-usage",
            "--disable-setuid-sandbox",
            "--no-sandbox",
        ],
        description="Extra Chromium command line flags",
    )

    # =========================================================================
    # RENDERING DEFAULTS
    # =========================================================================
    default_timeout_ms: int = Field(
        default=30000,
        description="Navigation timeout in ms when the request sets none",
    )

    # =========================================================================
    # EXISTING PDF PROBE
    # =========================================================================
    probe_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for the HEAD request that detects PDF content types",
    )
    probe_failure_fallthrough: bool = Field(
        default=False,
        description="Render the page anyway when the PDF probe request fails",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
