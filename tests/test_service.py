"""Tests for BackupService backup and restore orchestration."""

from __future__ import annotations

import json
import logging
from types import SimpleNamespace
from typing import Any, BinaryIO
from unittest.mock import MagicMock

import pytest

from remote_backup import backup, restore
from remote_backup._errors import (
    AuthenticationFailed,
    BackupError,
    ConfigurationError,
    CorruptBackup,
    FileNotFound,
    Phase,
    RestoreError,
    SerializationError,
    SettingsMissing,
    StorageProviderError,
)
from remote_backup._models import OperationResult
from remote_backup._service import BackupService, default_transport_factory
from remote_backup._settings import ConnectionSettings
from remote_backup._transport import WebDAVTransport
from remote_backup.providers import MemoryProvider

SERVER = "https://dav.example.com/remote.php/dav"


class FakeHTTPError(Exception):
    def __init__(self, status: int, message: str = "") -> None:
        self.response = SimpleNamespace(status_code=status)
        super().__init__(message or f"received {status}")


class ResourceNotFound(Exception):
    pass


class ResourceAlreadyExists(Exception):
    pass


class InMemoryDAV:
    """Just enough of a WebDAV server to hold files and directories."""

    base_url = SERVER

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
        parent = path.rsplit("/", 1)[0] if "/" in path else None
        if parent is not None and parent not in self.dirs:
            raise FakeHTTPError(409, "parent collection missing")
        self.dirs.add(path)

    def upload_fileobj(self, file_obj: BinaryIO, to_path: str, overwrite: bool = False) -> None:
        self.files[to_path] = file_obj.read()

    def download_fileobj(self, from_path: str, file_obj: BinaryIO) -> None:
        if from_path not in self.files:
            raise ResourceNotFound(from_path)
        file_obj.write(self.files[from_path])

    def remove(self, path: str) -> None:
        if self.files.pop(path, None) is None:
            raise ResourceNotFound(path)


class FailingProvider(MemoryProvider):
    def __init__(self, fail_on: str, error: Exception | None = None) -> None:
        super().__init__({"a": 1})
        self.fail_on = fail_on
        self.error = error or RuntimeError(f"{fail_on} exploded")
        self.calls: list[str] = []

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation == self.fail_on:
            raise self.error

    def export_all(self) -> Any:
        self._maybe_fail("export_all")
        return super().export_all()

    def import_all(self, snapshot: Any) -> None:
        self._maybe_fail("import_all")
        super().import_all(snapshot)

    def clear_all(self) -> None:
        self._maybe_fail("clear_all")
        super().clear_all()


@pytest.fixture
def dav() -> InMemoryDAV:
    return InMemoryDAV()


@pytest.fixture
def settings() -> ConnectionSettings:
    return ConnectionSettings(server_url=SERVER, username="alice", password="s3cret")


def _service(provider: Any, dav: InMemoryDAV) -> BackupService:
    return BackupService(provider, transport_factory=lambda s: WebDAVTransport(dav))


class TestConstruction:
    @pytest.mark.parametrize("missing", ["export_all", "import_all", "clear_all"])
    def test_provider_missing_operation(self, missing: str) -> None:
        namespace = {op: (lambda *a: None) for op in ("export_all", "import_all", "clear_all") if op != missing}
        incomplete = type("PartialStore", (), namespace)()
        with pytest.raises(ConfigurationError, match=f"'PartialStore' must implement {missing} method"):
            BackupService(incomplete)

    def test_non_callable_operation(self) -> None:
        provider = SimpleNamespace(name="odd", export_all=None, import_all=print, clear_all=print)
        with pytest.raises(ConfigurationError, match="'odd' must implement export_all"):
            BackupService(provider)  # type: ignore[arg-type]

    def test_duck_typed_provider(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        provider = SimpleNamespace(name="duck", export_all=lambda: {"k": "v"}, import_all=print, clear_all=print)
        result = _service(provider, dav).backup(settings)
        assert result.success

    def test_repr(self, provider: MemoryProvider) -> None:
        assert repr(BackupService(provider)) == "BackupService(provider='memory')"


class TestBackup:
    def test_uploads_snapshot_to_default_path(
        self, provider: MemoryProvider, dav: InMemoryDAV, settings: ConnectionSettings
    ) -> None:
        result = _service(provider, dav).backup(settings)
        assert result == OperationResult(success=True, message=f"Backup successful to {SERVER}/backup.json")
        assert json.loads(dav.files["backup.json"]) == provider.export_all()

    def test_remote_path_used_verbatim(self, provider: MemoryProvider, dav: InMemoryDAV) -> None:
        settings = ConnectionSettings(server_url=SERVER + "/", remote_path="backups/app/data.json")
        result = _service(provider, dav).backup(settings)
        assert "backups/app/data.json" in dav.files
        assert "backups/app" in dav.dirs
        assert result.message == f"Backup successful to {SERVER}/backups/app/data.json"

    def test_non_ascii_round_trips(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        _service(MemoryProvider({"note": "café ✓"}), dav).backup(settings)
        assert json.loads(dav.files["backup.json"]) == {"note": "café ✓"}

    def test_lone_surrogate_round_trips(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        snapshot = {"k": "bad \ud800 text"}
        _service(MemoryProvider(snapshot), dav).backup(settings)
        target = MemoryProvider()
        _service(target, dav).restore(settings)
        assert target.export_all() == snapshot

    def test_overwrites_previous_backup(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        dav.files["backup.json"] = b'{"old": true}'
        _service(MemoryProvider({"new": True}), dav).backup(settings)
        assert json.loads(dav.files["backup.json"]) == {"new": True}

    @pytest.mark.parametrize("bad", [None, ConnectionSettings(), {"serverUrl": ""}, {"username": "alice"}])
    def test_missing_settings(self, bad: Any) -> None:
        provider = FailingProvider(fail_on="")
        factory = MagicMock()
        with pytest.raises(SettingsMissing):
            BackupService(provider, transport_factory=factory).backup(bad)
        assert provider.calls == []
        factory.assert_not_called()

    def test_invalid_url_scheme(self, provider: MemoryProvider) -> None:
        with pytest.raises(ConfigurationError, match="http"):
            BackupService(provider).backup(ConnectionSettings(server_url="ftp://example.com"))

    def test_export_failure(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        provider = FailingProvider(fail_on="export_all")
        with pytest.raises(StorageProviderError) as exc_info:
            _service(provider, dav).backup(settings)
        err = exc_info.value
        assert err.phase is Phase.EXPORT_ALL
        assert err.provider == "memory"
        assert err.message == (
            "Backup failed due to storage provider 'memory' error during export_all: export_all exploded"
        )
        assert isinstance(err.cause, RuntimeError)
        assert dav.files == {}

    def test_export_failure_without_message(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        provider = FailingProvider(fail_on="export_all", error=RuntimeError())
        with pytest.raises(StorageProviderError, match="Storage provider operation export_all failed"):
            _service(provider, dav).backup(settings)

    def test_circular_snapshot(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        circular: dict[str, Any] = {}
        circular["self"] = circular
        provider = SimpleNamespace(name="loop", export_all=lambda: circular, import_all=print, clear_all=print)
        with pytest.raises(SerializationError, match="Failed to serialize data for backup"):
            _service(provider, dav).backup(settings)
        assert dav.files == {}

    def test_unserializable_snapshot(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        provider = SimpleNamespace(name="sets", export_all=lambda: {"s": {1, 2}}, import_all=print, clear_all=print)
        with pytest.raises(SerializationError) as exc_info:
            _service(provider, dav).backup(settings)
        assert isinstance(exc_info.value, BackupError)
        assert isinstance(exc_info.value.cause, TypeError)

    def test_upload_failure_keeps_transport_error(
        self, provider: MemoryProvider, dav: InMemoryDAV, settings: ConnectionSettings
    ) -> None:
        dav.upload_fileobj = MagicMock(side_effect=FakeHTTPError(401))  # type: ignore[method-assign]
        with pytest.raises(BackupError) as exc_info:
            _service(provider, dav).backup(settings)
        cause = exc_info.value.cause
        assert isinstance(cause, AuthenticationFailed)
        assert exc_info.value.message == f"WebDAV operation failed during backup: {cause.message}"

    def test_unexpected_failure(self, provider: MemoryProvider, settings: ConnectionSettings) -> None:
        def broken_factory(s: ConnectionSettings) -> WebDAVTransport:
            raise RuntimeError("factory broke")

        service = BackupService(provider, transport_factory=broken_factory)
        with pytest.raises(BackupError, match="An unexpected error occurred during WebDAV backup: factory broke"):
            service.backup(settings)

    def test_factory_receives_settings(self, provider: MemoryProvider, settings: ConnectionSettings) -> None:
        transport = MagicMock(spec=WebDAVTransport)
        factory = MagicMock(return_value=transport)
        BackupService(provider, transport_factory=factory).backup(settings)
        factory.assert_called_once_with(settings)
        transport.upload.assert_called_once()
        transport.close.assert_not_called()


class TestRestore:
    def test_replaces_local_data(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        dav.files["backup.json"] = json.dumps({"prompts": [1, 2]}).encode()
        provider = MemoryProvider({"stale": True})
        result = _service(provider, dav).restore(settings)
        assert result == OperationResult(success=True, message=f"Restore successful from {SERVER}/backup.json")
        assert provider.export_all() == {"prompts": [1, 2]}

    @pytest.mark.parametrize("bad", [None, ConnectionSettings(server_url="  ")])
    def test_missing_settings(self, bad: Any) -> None:
        provider = FailingProvider(fail_on="")
        with pytest.raises(SettingsMissing):
            BackupService(provider).restore(bad)
        assert provider.calls == []

    def test_download_failure_leaves_store_untouched(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        provider = FailingProvider(fail_on="")
        with pytest.raises(RestoreError) as exc_info:
            _service(provider, dav).restore(settings)
        assert isinstance(exc_info.value.cause, FileNotFound)
        assert exc_info.value.message.startswith("WebDAV operation failed during restore: File not found")
        assert provider.calls == []
        assert provider.export_all() == {"a": 1}

    def test_unexpected_download_failure(self, provider: MemoryProvider, settings: ConnectionSettings) -> None:
        transport = MagicMock(spec=WebDAVTransport)
        transport.download.side_effect = KeyError("boom")
        service = BackupService(provider, transport_factory=lambda s: transport)
        with pytest.raises(RestoreError, match="An unexpected error occurred during WebDAV download"):
            service.restore(settings)

    @pytest.mark.parametrize("content", [b"not json{", b"", b'{"a": '])
    def test_corrupt_backup(self, dav: InMemoryDAV, settings: ConnectionSettings, content: bytes) -> None:
        dav.files["backup.json"] = content
        provider = FailingProvider(fail_on="")
        with pytest.raises(CorruptBackup, match="The backup file might be corrupted") as exc_info:
            _service(provider, dav).restore(settings)
        assert isinstance(exc_info.value, RestoreError)
        assert provider.calls == []

    def test_deeply_nested_backup(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        dav.files["backup.json"] = b"[" * 200_000
        provider = FailingProvider(fail_on="")
        with pytest.raises(CorruptBackup, match="The backup file might be corrupted") as exc_info:
            _service(provider, dav).restore(settings)
        assert isinstance(exc_info.value.cause, RecursionError)
        assert provider.calls == []

    def test_clear_failure_skips_import(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        dav.files["backup.json"] = b'{"b": 2}'
        provider = FailingProvider(fail_on="clear_all")
        with pytest.raises(StorageProviderError) as exc_info:
            _service(provider, dav).restore(settings)
        assert exc_info.value.phase is Phase.CLEAR_ALL
        assert exc_info.value.message == (
            "Restore failed due to storage provider 'memory' error during clear_all: clear_all exploded"
        )
        assert provider.calls == ["clear_all"]

    def test_import_failure_leaves_store_empty(
        self, dav: InMemoryDAV, settings: ConnectionSettings, caplog: pytest.LogCaptureFixture
    ) -> None:
        dav.files["backup.json"] = b'{"b": 2}'
        provider = FailingProvider(fail_on="import_all")
        with caplog.at_level(logging.WARNING, logger="remote_backup._service"):
            with pytest.raises(StorageProviderError) as exc_info:
                _service(provider, dav).restore(settings)
        assert exc_info.value.phase is Phase.IMPORT_ALL
        assert provider.calls == ["clear_all", "import_all"]
        assert len(provider) == 0
        assert "store is now empty" in caplog.text

    def test_import_rejects_non_object(self, dav: InMemoryDAV, settings: ConnectionSettings) -> None:
        dav.files["backup.json"] = b"[1, 2, 3]"
        with pytest.raises(StorageProviderError, match="Snapshot must be a JSON object"):
            _service(MemoryProvider(), dav).restore(settings)


class TestRoundTrip:
    def test_backup_then_restore(self, provider: MemoryProvider, dav: InMemoryDAV) -> None:
        settings = ConnectionSettings(server_url=SERVER, remote_path="nested/dir/state.json")
        original = provider.export_all()
        service = _service(provider, dav)
        service.backup(settings)
        provider.set_item("extra", "added after backup")
        service.restore(settings)
        assert provider.export_all() == original

    def test_restore_into_another_provider(self, provider: MemoryProvider, dav: InMemoryDAV) -> None:
        settings = ConnectionSettings(server_url=SERVER)
        _service(provider, dav).backup(settings)
        target = MemoryProvider()
        _service(target, dav).restore(settings)
        assert target.export_all() == provider.export_all()


class TestSettingsInput:
    def test_mapping_with_camel_case_keys(self, provider: MemoryProvider, dav: InMemoryDAV) -> None:
        received: list[ConnectionSettings] = []

        def factory(s: ConnectionSettings) -> WebDAVTransport:
            received.append(s)
            return WebDAVTransport(dav)

        raw = {"serverUrl": SERVER, "username": "alice", "password": "pw", "remotePath": "x/y.json"}
        BackupService(provider, transport_factory=factory).backup(raw)
        assert received[0].remote_path == "x/y.json"
        assert received[0].username == "alice"
        assert "x/y.json" in dav.files

    def test_rejects_other_types(self, provider: MemoryProvider) -> None:
        with pytest.raises(ConfigurationError, match="Expected ConnectionSettings or a mapping, got str"):
            BackupService(provider).backup("https://dav.example.com")  # type: ignore[arg-type]


class TestModuleFunctions:
    def test_backup_and_restore(self, provider: MemoryProvider, dav: InMemoryDAV) -> None:
        settings = ConnectionSettings(server_url=SERVER)
        factory = lambda s: WebDAVTransport(dav)  # noqa: E731
        assert backup(settings, provider, transport_factory=factory).success
        target = MemoryProvider()
        assert restore(settings, target, transport_factory=factory).success
        assert target.export_all() == provider.export_all()


class TestDefaultTransportFactory:
    def test_builds_transport_from_settings(self, settings: ConnectionSettings) -> None:
        transport = default_transport_factory(settings)
        assert isinstance(transport, WebDAVTransport)
        assert transport.server_url == SERVER

    def test_default_transport_is_closed(self, provider: MemoryProvider, settings: ConnectionSettings) -> None:
        client = MagicMock()
        transport = default_transport_factory(settings)
        transport._client_instance = client
        BackupService(provider)._close_transport(transport)
        client.http.close.assert_called_once_with()

    def test_custom_factory_transport_is_left_open(self, provider: MemoryProvider) -> None:
        transport = MagicMock(spec=WebDAVTransport)
        BackupService(provider, transport_factory=lambda s: transport)._close_transport(transport)
        transport.close.assert_not_called()
