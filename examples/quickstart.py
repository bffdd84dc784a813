"""Quickstart: back up a local JSON store and restore it.

Demonstrates:
- Building ConnectionSettings from a camelCase settings mapping
- Backing up a JsonFileProvider with BackupService
- Restoring the backup after local changes

Set ``WEBDAV_URL`` (and optionally ``WEBDAV_USER``/``WEBDAV_PASSWORD``) to run
against a real server; this needs the ``webdav`` extra. Without it, a small
in-memory stand-in for the WebDAV client is used.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from typing import Any, BinaryIO

from remote_backup import BackupService, ConnectionSettings, WebDAVTransport
from remote_backup.providers import JsonFileProvider


class ResourceNotFound(Exception):
    pass


class ResourceAlreadyExists(Exception):
    pass


class InMemoryDAV:
    base_url = "https://dav.example.com/remote.php/dav"

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = set()

    def info(self, path: str) -> dict[str, Any]:
        if path in self.dirs:
            return {"type": "directory"}
        if path in self.files:
            return {"type": "file"}
        raise ResourceNotFound(path)

    def mkdir(self, path: str) -> None:
        if path in self.dirs:
            raise ResourceAlreadyExists(path)
        self.dirs.add(path)

    def upload_fileobj(self, file_obj: BinaryIO, to_path: str, overwrite: bool = False) -> None:
        self.files[to_path] = file_obj.read()

    def download_fileobj(self, from_path: str, file_obj: BinaryIO) -> None:
        if from_path not in self.files:
            raise ResourceNotFound(from_path)
        file_obj.write(self.files[from_path])

    def remove(self, path: str) -> None:
        del self.files[path]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    server_url = os.environ.get("WEBDAV_URL")
    raw_settings = {
        "serverUrl": server_url or InMemoryDAV.base_url,
        "username": os.environ.get("WEBDAV_USER", ""),
        "password": os.environ.get("WEBDAV_PASSWORD", ""),
        "remotePath": "remote-backup-demo/backup.json",
    }
    settings = ConnectionSettings.from_dict(raw_settings)

    dav = InMemoryDAV()
    factory = None if server_url else (lambda s: WebDAVTransport(dav))

    with tempfile.TemporaryDirectory() as tmp:
        store = JsonFileProvider(os.path.join(tmp, "store.json"))
        store.import_all({"prompts": [{"id": 1, "text": "Summarize this"}], "settings": {"theme": "dark"}})

        service = BackupService(store, transport_factory=factory)

        result = service.backup(settings)
        print(result.message)

        # Local changes after the backup
        store.set_item("scratch", "will be gone after restore")
        store.remove_item("settings")
        print(f"Keys before restore: {store.keys()}")

        result = service.restore(settings)
        print(result.message)
        print(f"Keys after restore: {store.keys()}")

        if not server_url:
            buf = io.BytesIO()
            dav.download_fileobj(settings.resolved_path, buf)
            print(f"Remote file: {buf.getvalue().decode('utf-8')}")

    print("Done!")
