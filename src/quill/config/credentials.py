"""Read-only access to the remote service credential."""

import os
from typing import Protocol

API_KEY_ENV = "ANTHROPIC_API_KEY"


class CredentialProvider(Protocol):
    """Protocol exposing whether a service credential is present."""

    @property
    def has_credential(self) -> bool: ...

    @property
    def api_key(self) -> str | None: ...


class EnvironmentCredentials:
    """Credential read from the ANTHROPIC_API_KEY environment variable.

    The variable is read on every access so a key added to the environment
    (for example by python-dotenv at startup) is picked up.
    """

    def __init__(self, env_var: str = API_KEY_ENV) -> None:
        self._env_var = env_var

    @property
    def api_key(self) -> str | None:
        value = os.environ.get(self._env_var, "").strip()
        return value or None

    @property
    def has_credential(self) -> bool:
        return self.api_key is not None


class StaticCredentials:
    """Fixed credential, used in tests and for explicit injection."""

    def __init__(self, api_key: str | None = None) -> None:
        self._api_key = api_key.strip() if api_key else None

    @property
    def api_key(self) -> str | None:
        return self._api_key or None

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key)


__all__ = [
    "API_KEY_ENV",
    "CredentialProvider",
    "EnvironmentCredentials",
    "StaticCredentials",
]
