"""
HTTP transport used by the API client.

The transport only moves bytes: it returns the status and body of whatever
the server answered, including error statuses, and leaves interpreting them
to the envelope parser. Anything with a matching ``send`` method can be
passed to APIClient in its place.
"""

import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol

from freshbooks_cli.core.errors import TransportError


@dataclass(frozen=True)
class RawResponse:
    """Status code and body text of an HTTP response."""

    status_code: int
    body_text: str


class Transport(Protocol):
    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None = None,
    ) -> RawResponse: ...


class UrllibTransport:
    """Transport built on urllib.request."""

    def __init__(self, timeout: float = 30):
        self.timeout = timeout

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None = None,
    ) -> RawResponse:
        """
        Send a request and return the raw response.

        Raises:
            TransportError: On connection errors and timeouts

        """
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return RawResponse(response.status, response.read().decode("utf-8", errors="replace"))

        except urllib.error.HTTPError as e:
            # Error statuses still carry an envelope worth parsing
            return RawResponse(e.code, e.read().decode("utf-8", errors="replace"))

        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}", details={"url": url}) from e

        except TimeoutError as e:
            raise TransportError(
                f"Request timed out after {self.timeout} seconds", details={"url": url}
            ) from e

        except OSError as e:
            raise TransportError(f"Connection error: {e}", details={"url": url}) from e
