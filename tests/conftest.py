"""Pytest configuration - loads .env and provides a fake transport."""

import json
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from freshbooks_cli.core.config import ClientConfig
from freshbooks_cli.core.transport import RawResponse
from freshbooks_cli.sdk import FreshBooksClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class FakeTransport:
    """Records requests and replays queued responses."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.responses: list[RawResponse] = []

    def queue(self, body: Any, status: int = 200) -> None:
        text = body if isinstance(body, str) else json.dumps(body)
        self.responses.append(RawResponse(status, text))

    def send(self, method, url, headers, body=None) -> RawResponse:
        self.requests.append(
            {
                "method": method,
                "url": url,
                "headers": headers,
                "body": json.loads(body) if body else None,
            }
        )
        return self.responses.pop(0)

    @property
    def last(self) -> dict[str, Any]:
        return self.requests[-1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        client_id="test_client_id",
        access_token="test_token",
        redirect_uri="https://example.com/callback",
        api_base_url="https://api.example.com",
        auth_base_url="https://auth.example.com",
    )


@pytest.fixture
def client(config, transport) -> FreshBooksClient:
    return FreshBooksClient(config=config, transport=transport)
