"""Shared HTTP transport settings pushed into every registered backend."""

from dataclasses import dataclass
from typing import Any

import httpx

DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "geocoder-list/1.0"


@dataclass(frozen=True)
class Transport:
    """User agent, proxy and timeout shared by all backends of a dispatcher.

    ``trust_env`` lets httpx pick up proxy settings from the environment
    (``HTTPS_PROXY`` and friends) when no explicit proxy is given.
    """

    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT
    proxy: str | None = None
    trust_env: bool = True

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for constructing an ``httpx.AsyncClient``."""
        kwargs: dict[str, Any] = {
            "timeout": self.timeout,
            "headers": {"User-Agent": self.user_agent},
            "trust_env": self.trust_env,
        }
        if self.proxy:
            kwargs["proxy"] = self.proxy
        return kwargs

    def client(self) -> httpx.AsyncClient:
        """Create an async HTTP client configured with these settings."""
        return httpx.AsyncClient(**self.client_kwargs())
