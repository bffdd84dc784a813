"""Error handling: catching SettingsMissing, BackupError, CorruptBackup, etc.

Demonstrates the error taxonomy and how to react to failures using the
structured attributes (``kind``, ``phase``, ``cause``) instead of messages.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

from remote_backup import (
    AuthenticationFailed,
    BackupError,
    BackupService,
    ConnectionSettings,
    CorruptBackup,
    ErrorKind,
    Operation,
    RemoteBackupError,
    SettingsMissing,
    StorageProviderError,
    WebDAVTransport,
    classify,
)
from remote_backup.providers import MemoryProvider


class HTTPError(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}")
        self.response = SimpleNamespace(status_code=status)


if __name__ == "__main__":
    store = MemoryProvider({"notes": ["first"]})
    settings = ConnectionSettings(server_url="https://dav.example.com/dav", remote_path="app/backup.json")

    # --- SettingsMissing: nothing configured yet ---
    try:
        BackupService(store).backup(ConnectionSettings())
    except SettingsMissing as exc:
        print(f"SettingsMissing: {exc}")

    # --- BackupError wrapping a classified transport failure ---
    client = MagicMock(base_url=settings.server_url)
    client.info.return_value = {"type": "directory"}
    client.upload_fileobj.side_effect = HTTPError(401)
    service = BackupService(store, transport_factory=lambda s: WebDAVTransport(client))
    try:
        service.backup(settings)
    except BackupError as exc:
        print(f"\nBackupError: {exc}")
        if isinstance(exc.cause, AuthenticationFailed):
            print(f"  cause kind={exc.cause.kind.value}, operation={exc.cause.operation.value}")

    # --- CorruptBackup: remote file is not JSON ---
    client.download_fileobj.side_effect = lambda path, buf: buf.write(b"<html>not json</html>")
    try:
        service.restore(settings)
    except CorruptBackup as exc:
        print(f"\nCorruptBackup: {exc}")
        print(f"  local items untouched: {store.export_all()}")

    # --- StorageProviderError names the failing phase ---
    client.download_fileobj.side_effect = lambda path, buf: buf.write(b"[1, 2, 3]")
    try:
        service.restore(settings)
    except StorageProviderError as exc:
        print(f"\nStorageProviderError during {exc.phase.value}: {exc.message}")

    # --- Classification without raising ---
    print()
    for status in (401, 403, 404, 429, 507, 500):
        kind = classify(status, "", Operation.WRITE, "app/backup.json")
        print(f"HTTP {status} on write -> {kind.value}")
    assert classify(None, "getaddrinfo ENOTFOUND", Operation.READ, "x") is ErrorKind.CONNECTION

    # --- Catch anything from the library with the base class ---
    try:
        BackupService(store).restore(None)
    except RemoteBackupError as exc:
        print(f"\nRemoteBackupError ({type(exc).__name__}): {exc}")

    print("\nDone!")
