"""
Client configuration.

Values come from explicit arguments first, then FRESHBOOKS_* environment
variables, then defaults.
"""

import os
from dataclasses import dataclass, fields
from typing import Any

from freshbooks_cli._version import __version__
from freshbooks_cli.core.errors import ConfigurationError

DEFAULT_API_BASE_URL = "https://api.freshbooks.com"
DEFAULT_AUTH_BASE_URL = "https://auth.freshbooks.com"
DEFAULT_TIMEOUT = 30

ENV_PREFIX = "FRESHBOOKS_"


@dataclass
class ClientConfig:
    """Credentials and endpoints for talking to FreshBooks."""

    client_id: str | None = None
    client_secret: str | None = None
    redirect_uri: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    api_base_url: str = DEFAULT_API_BASE_URL
    auth_base_url: str = DEFAULT_AUTH_BASE_URL
    user_agent: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        self.api_base_url = self.api_base_url.rstrip("/")
        self.auth_base_url = self.auth_base_url.rstrip("/")
        try:
            self.timeout = float(self.timeout)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid timeout {self.timeout!r}") from e

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build a config from the environment.

        Args:
            **overrides: Field values that take precedence over the
                environment. ``None`` values are ignored.

        """
        values: dict[str, Any] = {}
        for f in fields(cls):
            env_value = os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if env_value:
                values[f.name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def get_user_agent(self) -> str:
        if self.user_agent:
            return self.user_agent
        agent = f"FreshBooks python sdk/{__version__}"
        if self.client_id:
            agent += f" client_id {self.client_id}"
        return agent
