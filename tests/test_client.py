"""Tests for the low-level APIClient and the urllib transport."""

import io
import json
import logging
import urllib.error

import pytest

from freshbooks_cli.core.client import APIClient
from freshbooks_cli._version import __version__
from freshbooks_cli.core.config import ClientConfig
from freshbooks_cli.core.errors import APIError, MalformedResponseError, TransportError
from freshbooks_cli.core.transport import RawResponse, UrllibTransport


class _FakeUrlResponse:
    def __init__(self, status: int, payload: dict | bytes) -> None:
        self.status = status
        self._body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


def test_urllib_transport_returns_success(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(req, timeout=None):
        captured["method"] = req.get_method()
        captured["url"] = req.full_url
        captured["data"] = req.data
        captured["timeout"] = timeout
        return _FakeUrlResponse(200, {"response": {"result": {}}})

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)

    response = UrllibTransport(timeout=7).send("POST", "https://api.example.com/x", {"Accept": "application/json"}, b"{}")

    assert response == RawResponse(200, '{"response": {"result": {}}}')
    assert captured == {"method": "POST", "url": "https://api.example.com/x", "data": b"{}", "timeout": 7}


def test_urllib_transport_returns_error_statuses(monkeypatch) -> None:
    body = b'{"response": {"errors": {"message": "Nope", "errno": 1}}}'

    def fake_urlopen(req, timeout=None):
        raise urllib.error.HTTPError(req.full_url, 404, "Not Found", {}, io.BytesIO(body))

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)

    response = UrllibTransport().send("GET", "https://api.example.com/x", {})

    assert response.status_code == 404
    assert response.body_text == body.decode("utf-8")


def test_urllib_transport_undecodable_success_body(monkeypatch, config) -> None:
    def fake_urlopen(req, timeout=None):
        return _FakeUrlResponse(200, b"\xff\xfe garbage")

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)

    response = UrllibTransport().send("GET", "https://api.example.com/x", {})

    assert response.status_code == 200
    assert response.body_text.endswith(" garbage")

    with pytest.raises(MalformedResponseError) as exc_info:
        APIClient(config, UrllibTransport()).get("/auth/api/v1/users/me")

    assert exc_info.value.status == 200


def test_urllib_transport_connection_error(monkeypatch) -> None:
    def fake_urlopen(req, timeout=None):
        raise urllib.error.URLError("Name or service not known")

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)

    with pytest.raises(TransportError) as exc_info:
        UrllibTransport().send("GET", "https://api.example.com/x", {})

    assert not isinstance(exc_info.value, APIError)
    assert "Name or service not known" in exc_info.value.message


def test_urllib_transport_timeout(monkeypatch) -> None:
    def fake_urlopen(req, timeout=None):
        raise TimeoutError("timed out")

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)

    with pytest.raises(TransportError, match="timed out after 3"):
        UrllibTransport(timeout=3).send("GET", "https://api.example.com/x", {})


def test_api_client_uses_configured_timeout() -> None:
    client = APIClient(ClientConfig(access_token="t", timeout=12))
    assert isinstance(client.transport, UrllibTransport)
    assert client.transport.timeout == 12


def test_api_client_logs_without_token(transport, config, caplog) -> None:
    transport.queue({"response": {"result": {}}})
    client = APIClient(config, transport)

    with caplog.at_level(logging.DEBUG, logger="freshbooks_cli.core.client"):
        client.get("/auth/api/v1/users/me")

    assert "GET https://api.example.com/auth/api/v1/users/me -> 200" in caplog.text
    assert "test_token" not in caplog.text


def test_api_client_absolute_url(transport, config) -> None:
    transport.queue({"response": {}})
    APIClient(config, transport).get("https://other.example.com/path")

    assert transport.last["url"] == "https://other.example.com/path"


def test_custom_user_agent() -> None:
    assert ClientConfig(user_agent="my-app/1.0").get_user_agent() == "my-app/1.0"


def test_default_user_agent_without_client_id() -> None:
    assert ClientConfig().get_user_agent() == f"FreshBooks python sdk/{__version__}"
    assert ClientConfig(client_id="abc").get_user_agent() == f"FreshBooks python sdk/{__version__} client_id abc"
