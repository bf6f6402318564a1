"""
Client configuration.

Configuration can be provided directly, via environment variables, or from
a YAML settings file:

```yaml
wiki:
  api_url: "https://wiki.example.org/w/api.php"
  user_agent: "docs-sync-bot/1.2 (ops@example.org)"
  maxlag: 5
  max_retries: -1      # -1 retries lagged requests indefinitely
  timeout: 30
  username: "DocsBot"
  password: "bot-password"
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .api.engine import MAXLAG_DEFAULT, UNLIMITED_RETRIES

VERSION = "1.0.0"
DEFAULT_USER_AGENT = f"wiki-access/{VERSION} (python)"


@dataclass
class ClientConfig:
    """Configuration for a WikiClient.

    Environment Variables:
        WIKI_API_URL: Full URL of api.php (required)
        WIKI_USER_AGENT: User-Agent header (default: wiki-access/<version>)
        WIKI_MAXLAG: Maximum acceptable replication lag in seconds (default: 5)
        WIKI_MAX_RETRIES: Retries for lagged requests, -1 for unlimited (default: -1)
        WIKI_TIMEOUT: HTTP timeout in seconds (default: 30)
        WIKI_USERNAME / WIKI_PASSWORD / WIKI_DOMAIN: Login credentials

    Attributes:
        api_url: Full URL of the api.php endpoint
        user_agent: User-Agent sent with every request
        maxlag: Maximum acceptable replication lag (seconds)
        max_retries: Lag retry budget; -1 retries indefinitely
        timeout: Total HTTP timeout per request (seconds)
        headers: Extra default HTTP headers
        username: Login name used when login() is called without arguments
        password: Login password
        domain: Optional login domain
    """

    api_url: str
    user_agent: str = DEFAULT_USER_AGENT
    maxlag: int = MAXLAG_DEFAULT
    max_retries: int = UNLIMITED_RETRIES
    timeout: float = 30.0
    headers: dict[str, str] = field(default_factory=dict)
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    domain: str | None = None

    def __post_init__(self) -> None:
        if not self.api_url:
            raise ValueError("api_url is required")
        if self.maxlag < 0:
            raise ValueError(f"maxlag must be >= 0, got {self.maxlag}")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Create config from environment variables.

        Raises:
            ValueError: If WIKI_API_URL is not set or a numeric value is invalid
        """
        api_url = os.environ.get("WIKI_API_URL")
        if not api_url:
            raise ValueError("WIKI_API_URL environment variable required")

        return cls(
            api_url=api_url,
            user_agent=os.environ.get("WIKI_USER_AGENT", DEFAULT_USER_AGENT),
            maxlag=int(os.environ.get("WIKI_MAXLAG", str(MAXLAG_DEFAULT))),
            max_retries=int(os.environ.get("WIKI_MAX_RETRIES", str(UNLIMITED_RETRIES))),
            timeout=float(os.environ.get("WIKI_TIMEOUT", "30")),
            username=os.environ.get("WIKI_USERNAME"),
            password=os.environ.get("WIKI_PASSWORD"),
            domain=os.environ.get("WIKI_DOMAIN"),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> ClientConfig:
        """Create config from the ``wiki`` section of a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If api_url is missing
        """
        config_path = Path(path)
        data: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        section = data.get("wiki", {}) or {}

        if not section.get("api_url"):
            raise ValueError(f"wiki.api_url missing in {config_path}")

        return cls(
            api_url=section["api_url"],
            user_agent=section.get("user_agent", DEFAULT_USER_AGENT),
            maxlag=int(section.get("maxlag", MAXLAG_DEFAULT)),
            max_retries=int(section.get("max_retries", UNLIMITED_RETRIES)),
            timeout=float(section.get("timeout", 30.0)),
            headers=dict(section.get("headers", {}) or {}),
            username=section.get("username"),
            password=section.get("password"),
            domain=section.get("domain"),
        )
