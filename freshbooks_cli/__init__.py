"""
FreshBooks CLI - Three-layer client for the FreshBooks API.

Layers:
- core: Raw types, query builders, envelope parsing and HTTP client
- sdk: High-level FreshBooksClient with one accessor per resource
- cli: Opinionated command-line interface
"""

from freshbooks_cli._version import __version__
from freshbooks_cli.sdk import FreshBooksClient

__all__ = ["FreshBooksClient", "__version__"]
