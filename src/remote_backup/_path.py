"""Remote path helpers: backup path validation and parent resolution."""

from __future__ import annotations

from remote_backup._errors import ConfigurationError


def parent_of(path: str) -> str | None:
    """Return the parent segment of *path*, or ``None`` if it has none.

    Example: ``parent_of("a/b/c.json")`` returns ``"a/b"``, while
    ``parent_of("c.json")`` and ``parent_of("/c.json")`` return ``None``.
    """
    if "/" not in path:
        return None
    parent = path.rsplit("/", 1)[0]
    return parent or None


def validate_remote_path(raw: str) -> None:
    """Check the configured path of the backup file, relative to the server URL.

    The path is used verbatim, so invalid input is rejected instead of
    normalized.

    :param raw: The configured remote path.
    :raises ConfigurationError: If the path is empty, starts or ends with a
        separator, or contains a null byte or a ``..`` segment.
    """
    if not raw:
        raise ConfigurationError("Remote path must not be empty")
    if "\0" in raw:
        raise ConfigurationError(f"Remote path contains null byte: {raw!r}")
    if raw.startswith("/") or raw.endswith("/"):
        raise ConfigurationError(f"Remote path must not begin or end with '/': {raw!r}")
    if ".." in raw.split("/"):
        raise ConfigurationError(f"Remote path contains '..' segment: {raw!r}")
