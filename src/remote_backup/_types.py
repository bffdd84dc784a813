"""Type aliases used throughout remote_backup."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from remote_backup._settings import ConnectionSettings
    from remote_backup._transport import WebDAVTransport

Snapshot = Any
UploadData = Union[str, bytes]  # noqa: UP007
TransportFactory = Callable[["ConnectionSettings"], "WebDAVTransport"]
