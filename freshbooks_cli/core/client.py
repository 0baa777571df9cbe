"""
Core HTTP client for the FreshBooks API.

Handles authentication headers, request bodies and response envelopes.
"""

import json
import logging
from typing import Any

from freshbooks_cli.core.config import ClientConfig
from freshbooks_cli.core.envelope import ParsedEnvelope, parse_envelope
from freshbooks_cli.core.errors import ConfigurationError
from freshbooks_cli.core.transport import Transport, UrllibTransport

logger = logging.getLogger(__name__)


class APIClient:
    """
    Low-level HTTP client for the FreshBooks API.

    Handles:
    - Authentication via OAuth bearer token
    - HTTP methods (GET, POST, PUT, DELETE)
    - Envelope unwrapping and error classification
    """

    def __init__(self, config: ClientConfig, transport: Transport | None = None):
        """
        Initialize the API client.

        Args:
            config: Client configuration
            transport: HTTP transport (defaults to UrllibTransport)

        """
        self.config = config
        self.transport = transport or UrllibTransport(timeout=config.timeout)

    def _ensure_access_token(self) -> str:
        """Ensure an access token is configured."""
        if not self.config.access_token:
            raise ConfigurationError("FRESHBOOKS_ACCESS_TOKEN environment variable not set")
        return self.config.access_token

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http"):
            return path
        return f"{self.config.api_base_url}{path}"

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._ensure_access_token()}",
            "User-Agent": self.config.get_user_agent(),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
    ) -> ParsedEnvelope:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path (e.g., /accounting/account/{id}/users/clients)
            data: Request body for POST/PUT

        Returns:
            Parsed envelope with payload and pagination meta

        Raises:
            ConfigurationError: No access token configured
            TransportError: The request could not be sent
            APIError: On error statuses or unparseable responses

        """
        headers = self.headers()
        url = self._build_url(path)
        body = json.dumps(data).encode("utf-8") if data is not None else None

        response = self.transport.send(method, url, headers, body)
        logger.debug("%s %s -> %s", method, url, response.status_code)

        return parse_envelope(response.status_code, response.body_text)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str) -> ParsedEnvelope:
        """Make a GET request."""
        return self.request("GET", path)

    def post(self, path: str, data: dict[str, Any] | None = None) -> ParsedEnvelope:
        """Make a POST request."""
        return self.request("POST", path, data)

    def put(self, path: str, data: dict[str, Any] | None = None) -> ParsedEnvelope:
        """Make a PUT request."""
        return self.request("PUT", path, data)

    def delete(self, path: str) -> ParsedEnvelope:
        """Make a DELETE request."""
        return self.request("DELETE", path)
