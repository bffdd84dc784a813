"""Connection settings: immutable data containers describing the WebDAV target."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from urllib.parse import urlsplit

from remote_backup._errors import ConfigurationError, SettingsMissing
from remote_backup._path import validate_remote_path

DEFAULT_REMOTE_PATH = "backup.json"
DEFAULT_TIMEOUT = 30.0

_ALLOWED_SCHEMES = frozenset({"http", "https"})

# camelCase keys as stored by UI collaborators
_KEY_ALIASES = {
    "serverUrl": "server_url",
    "remotePath": "remote_path",
}


@dataclasses.dataclass(frozen=True)
class WebDAVOptions:
    """Options for building a low-level WebDAV client.

    :param server_url: Absolute base URL of the WebDAV server.
    :param username: Optional user name for basic authentication.
    :param password: Optional password for basic authentication.
    :param timeout: Request timeout in seconds, enforced by the HTTP client.
    """

    server_url: str
    username: str | None = None
    password: str | None = dataclasses.field(default=None, repr=False)
    timeout: float = DEFAULT_TIMEOUT


@dataclasses.dataclass(frozen=True)
class ConnectionSettings:
    """Where and how to reach the backup file. Supplied by the caller per call.

    :param server_url: Absolute ``http``/``https`` URL of the WebDAV server.
    :param username: Optional user name.
    :param password: Optional password.
    :param remote_path: Path of the backup file relative to ``server_url``.
        Defaults to :data:`DEFAULT_REMOTE_PATH` at the server root.
    """

    server_url: str = ""
    username: str | None = None
    password: str | None = dataclasses.field(default=None, repr=False)
    remote_path: str | None = None

    def validate(self) -> None:
        """Check that the settings describe a reachable target.

        :raises SettingsMissing: If ``server_url`` is empty.
        :raises ConfigurationError: If the URL scheme is not ``http``/``https``
            or ``remote_path`` is malformed.
        """
        if not self.server_url or not self.server_url.strip():
            raise SettingsMissing("WebDAV server URL is not configured.")
        parts = urlsplit(self.server_url)
        if parts.scheme not in _ALLOWED_SCHEMES or not parts.netloc:
            raise ConfigurationError(
                f"WebDAV server URL must be an absolute http(s) URL, got {self.server_url!r}"
            )
        if self.remote_path:
            validate_remote_path(self.remote_path)

    @property
    def resolved_path(self) -> str:
        """The configured remote path, or the default file name."""
        return self.remote_path or DEFAULT_REMOTE_PATH

    def options(self, *, timeout: float = DEFAULT_TIMEOUT) -> WebDAVOptions:
        """Client options derived from these settings."""
        return WebDAVOptions(
            server_url=self.server_url,
            username=self.username,
            password=self.password,
            timeout=timeout,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ConnectionSettings:
        """Construct from a plain mapping (e.g. parsed JSON from a settings store).

        Accepts both ``server_url``/``remote_path`` and ``serverUrl``/``remotePath``.
        Unknown keys are ignored; empty strings count as unset.

        :param data: Mapping with the connection fields.
        """
        if not isinstance(data, Mapping):
            msg = f"Expected a mapping of settings, got {type(data).__name__}"
            raise TypeError(msg)
        fields: dict[str, str | None] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(str(key), str(key))
            if name not in ("server_url", "username", "password", "remote_path"):
                continue
            fields[name] = str(value) if value not in (None, "") else None
        return cls(
            server_url=fields.get("server_url") or "",
            username=fields.get("username"),
            password=fields.get("password"),
            remote_path=fields.get("remote_path"),
        )
