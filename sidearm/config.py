"""Configuration defaults and .env loading for the Sidearm client.

WHY: The client needs exactly two inputs, an API key and a base URL. Both
can come from the caller or from the environment, so scripts and notebooks
work without hardcoding secrets.

HOW: python-dotenv loads the .env file on import. Defaults are module-level
strings. ClientConfig is the frozen, validated pair the transport core
holds for its whole lifetime.

RULES:
- API key is loaded from SIDEARM_API_KEY, never hardcoded
- Base URL defaults to https://api.sdrm.io, overridable via SIDEARM_BASE_URL
- Trailing slashes are always stripped from the base URL
- Explicit constructor arguments win over environment values
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from sidearm.api.errors import ConfigurationError

# Load .env from the working directory (where the script is run from)
load_dotenv()

DEFAULT_BASE_URL = "https://api.sdrm.io"
API_KEY_URL = "https://sdrm.io/api-keys"


def default_base_url() -> str:
    """Return the base URL from SIDEARM_BASE_URL, or the public default."""
    return os.getenv("SIDEARM_BASE_URL", "").strip() or DEFAULT_BASE_URL


def load_api_key() -> str:
    """Load the Sidearm API key from the environment.

    RULES:
    - Raises ConfigurationError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("SIDEARM_API_KEY", "").strip()
    if not key:
        raise ConfigurationError(
            "api_key is required. Pass api_key=... or set SIDEARM_API_KEY. "
            "Get yours at {}".format(API_KEY_URL)
        )
    return key


@dataclass(frozen=True)
class ClientConfig:
    """Immutable credential + endpoint pair.

    WHY: Every request needs the same key and base URL. Freezing them at
    construction means the transport core has no mutable state beyond its
    connection pool.

    RULES:
    - api_key is non-empty after stripping whitespace
    - base_url never ends with "/"
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(
                "api_key is required. Get yours at {}".format(API_KEY_URL)
            )
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def resolve(
        cls,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> ClientConfig:
        """Build a config from explicit arguments, falling back to the environment."""
        if api_key is None:
            api_key = load_api_key()
        return cls(api_key=api_key, base_url=base_url or default_base_url())
