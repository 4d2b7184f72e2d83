"""
URL to PDF - HTTP service rendering web pages and HTML to PDF.
"""

__version__ = "1.0.0"
