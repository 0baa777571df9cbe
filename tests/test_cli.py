"""
FreshBooks CLI tests.

In-process tests run main() against a FreshBooksClient wired to a fake
transport. The help smoke tests run the real module in a subprocess.

Run with: python -m pytest tests/test_cli.py -v
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from freshbooks_cli import cli

CLI_TIMEOUT = 60  # Timeout in seconds for CLI commands


# =============================================================================
# Helpers
# =============================================================================


def run_cli(*args: str, timeout: int = CLI_TIMEOUT) -> subprocess.CompletedProcess:
    """Run the CLI module with given arguments."""
    cmd = [sys.executable, "-m", "freshbooks_cli.cli"] + list(args)
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        env=os.environ.copy(),
        timeout=timeout,
        cwd=Path(__file__).resolve().parent.parent,
    )


@pytest.fixture
def run(monkeypatch, client, capsys):
    """Run main() in-process and return (exit_code, parsed JSON output)."""
    monkeypatch.setattr(cli, "FreshBooksClient", lambda: client)

    def _run(*args: str):
        code = 0
        try:
            cli.main(list(args))
        except SystemExit as e:
            code = e.code or 0
        out = capsys.readouterr().out
        return code, json.loads(out) if out.strip() else None

    return _run


# =============================================================================
# Help Commands
# =============================================================================


class TestHelpCommands:
    """Help output needs no credentials or network."""

    def test_main_help(self):
        result = run_cli("--help")
        assert result.returncode == 0
        assert "clients" in result.stdout
        assert "auth-url" in result.stdout

    @pytest.mark.parametrize("resource", ["clients", "invoices", "payments", "taxes", "team"])
    def test_resource_help(self, resource):
        result = run_cli(resource, "--help")
        assert result.returncode == 0
        for sub in ("list", "get", "create", "update", "delete"):
            assert sub in result.stdout


# =============================================================================
# Commands
# =============================================================================


class TestCommands:
    def test_clients_list(self, run, transport):
        transport.queue(
            {
                "response": {
                    "result": {
                        "clients": [{"id": 1, "organization": "Acme", "fname": "John"}],
                        "page": 1,
                        "pages": 1,
                        "per_page": 10,
                        "total": 1,
                    }
                }
            }
        )

        code, out = run(
            "clients", "list", "ACM123", "--search", "email=a@b.com", "--per-page", "10", "--sort", "organization", "--desc"
        )

        assert code == 0
        assert out == {
            "data": [{"id": 1, "organization": "Acme", "fname": "John"}],
            "meta": {"total": 1, "per_page": 10, "page": 1, "pages": 1},
        }
        url = transport.last["url"]
        assert url.startswith("https://api.example.com/accounting/account/ACM123/users/clients?")
        assert "search%5Bemail%5D=a%40b.com" in url
        assert "per_page=10" in url
        assert "sort=organization_desc" in url

    def test_team_list(self, run, transport):
        transport.queue(
            {"response": {"result": [{"uuid": "u1", "first_name": "Ada"}]}, "meta": {"total": 11, "per_page": 10, "page": 1}}
        )

        code, out = run("team", "list", "6543")

        assert code == 0
        assert out["data"] == [{"uuid": "u1", "first_name": "Ada"}]
        assert out["meta"]["pages"] == 2

    def test_invoices_get_with_include(self, run, transport):
        transport.queue({"response": {"result": {"invoice": {"id": 4, "invoice_number": "0004"}}}})

        code, out = run("invoices", "get", "ACM123", "4", "--include", "lines")

        assert code == 0
        assert out == {"id": 4, "invoice_number": "0004"}
        assert transport.last["url"].endswith("/invoices/invoices/4?include%5B%5D=lines")

    def test_create_from_stdin(self, run, transport, monkeypatch):
        import io

        monkeypatch.setattr(sys, "stdin", io.StringIO('{"name": "VAT", "amount": "20"}'))
        transport.queue({"response": {"result": {"tax": {"id": 3, "name": "VAT", "amount": "20"}}}})

        code, out = run("taxes", "create", "ACM123", "--data", "-")

        assert code == 0
        assert out == {"id": 3, "name": "VAT", "amount": "20"}
        assert transport.last["body"] == {"tax": {"name": "VAT", "amount": "20"}}

    def test_update(self, run, transport):
        transport.queue({"response": {"result": {"client": {"id": 1, "email": "x@example.com"}}}})

        code, out = run("clients", "update", "ACM123", "1", "--data", '{"email": "x@example.com"}')

        assert code == 0
        assert transport.last["method"] == "PUT"
        assert out["email"] == "x@example.com"

    def test_delete(self, run, transport):
        transport.queue({"response": {"result": {"payment": {"id": 8, "vis_state": 1}}}})

        code, out = run("payments", "delete", "ACM123", "8")

        assert code == 0
        assert out == {"deleted": True, "id": "8"}
        assert transport.last["method"] == "DELETE"

    def test_me(self, run, transport):
        transport.queue({"response": {"identity_id": 5, "first_name": "Ada", "business_memberships": []}})

        code, out = run("me")

        assert code == 0
        assert out["identity_id"] == 5
        assert out["first_name"] == "Ada"

    def test_auth_url(self, run):
        code, out = run("auth-url", "--scope", "user:profile:read")

        assert code == 0
        assert out["url"].startswith("https://auth.example.com/oauth/authorize?client_id=test_client_id")
        assert "scope=user%3Aprofile%3Aread" in out["url"]


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    def test_api_error_output(self, run, transport):
        transport.queue({"response": {"errors": [{"message": "Client not found.", "errno": 1012}]}}, status=404)

        code, out = run("clients", "get", "ACM123", "999")

        assert code == 1
        assert out["error"] == "Client not found."
        assert out["status"] == 404
        assert out["errno"] == 1012

    def test_invalid_json_data(self, run, transport):
        code, out = run("clients", "create", "ACM123", "--data", "{not json")

        assert code == 1
        assert out["error"].startswith("Invalid JSON")
        assert transport.requests == []

    def test_invalid_search(self, run, transport):
        code, out = run("clients", "list", "ACM123", "--search", "nonsense")

        assert code == 1
        assert "FIELD=VALUE" in out["error"]
        assert transport.requests == []

    def test_missing_redirect_uri(self, run, client):
        client.config.redirect_uri = None

        code, out = run("auth-url")

        assert code == 1
        assert out == {"error": "redirect_uri must be configured"}

    def test_invalid_config_is_reported(self, monkeypatch, capsys):
        monkeypatch.setenv("FRESHBOOKS_TIMEOUT", "thirty")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["clients", "list", "ACM123"])

        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out) == {"error": "Invalid timeout 'thirty'"}
