"""BackupService: whole-store backup to and restore from a WebDAV server."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Union

from remote_backup._errors import (
    BackupError,
    ConfigurationError,
    CorruptBackup,
    Phase,
    RestoreError,
    SerializationError,
    SettingsMissing,
    StorageProviderError,
    WebDAVError,
)
from remote_backup._models import OperationResult
from remote_backup._provider import provider_name, validate_provider
from remote_backup._settings import ConnectionSettings
from remote_backup._transport import WebDAVTransport

if TYPE_CHECKING:
    from remote_backup._provider import DataProvider
    from remote_backup._types import Snapshot, TransportFactory

log = logging.getLogger(__name__)

SettingsLike = Union[ConnectionSettings, Mapping[str, object]]  # noqa: UP007


def default_transport_factory(settings: ConnectionSettings) -> WebDAVTransport:
    """Build a transport that owns a fresh client for *settings*."""
    return WebDAVTransport(settings.options())


def _coerce_settings(settings: SettingsLike | None) -> ConnectionSettings:
    if settings is None:
        raise SettingsMissing()
    if isinstance(settings, ConnectionSettings):
        resolved = settings
    elif isinstance(settings, Mapping):
        resolved = ConnectionSettings.from_dict(settings)
    else:
        raise ConfigurationError(f"Expected ConnectionSettings or a mapping, got {type(settings).__name__}")
    resolved.validate()
    return resolved


def _reason(exc: BaseException, fallback: str) -> str:
    return getattr(exc, "message", None) or str(exc) or fallback


class BackupService:
    """Backs up and restores a data provider as one JSON file on a WebDAV server.

    The service holds no state between calls; settings are passed per call.
    Callers must not run a backup and a restore against the same provider
    concurrently.

    :param provider: The local data store. Must implement ``export_all``,
        ``import_all`` and ``clear_all``.
    :param transport_factory: Builds a transport for the given settings.
        Defaults to a fresh :class:`WebDAVTransport` per call.
    :raises ConfigurationError: If the provider lacks a bulk operation.
    """

    def __init__(self, provider: DataProvider, *, transport_factory: TransportFactory | None = None) -> None:
        validate_provider(provider)
        self._provider = provider
        self._provider_name = provider_name(provider)
        self._transport_factory = transport_factory or default_transport_factory

    def __repr__(self) -> str:
        return f"BackupService(provider={self._provider_name!r})"

    def _open_transport(self, settings: ConnectionSettings) -> WebDAVTransport:
        return self._transport_factory(settings)

    def _close_transport(self, transport: WebDAVTransport) -> None:
        if self._transport_factory is default_transport_factory:
            transport.close()

    def backup(self, settings: SettingsLike | None) -> OperationResult:
        """Export every item and upload it as JSON.

        :raises SettingsMissing: If no server URL is configured.
        :raises ConfigurationError: If the settings are malformed.
        :raises StorageProviderError: If ``export_all`` fails.
        :raises SerializationError: If the snapshot is not JSON-serializable.
        :raises BackupError: If the upload fails; ``cause`` holds the transport error.
        """
        resolved = _coerce_settings(settings)
        remote_path = resolved.resolved_path
        log.info("Starting backup of %r to %s", self._provider_name, remote_path)

        try:
            snapshot = self._provider.export_all()
        except Exception as exc:
            raise StorageProviderError(
                f"Backup failed due to storage provider '{self._provider_name}' error during export_all: "
                f"{_reason(exc, 'Storage provider operation export_all failed.')}",
                provider=self._provider_name,
                phase=Phase.EXPORT_ALL,
                cause=exc,
            ) from exc

        try:
            payload = json.dumps(snapshot)
        except (TypeError, ValueError, RecursionError) as exc:
            raise SerializationError(f"Failed to serialize data for backup: {exc}", cause=exc) from exc

        try:
            transport = self._open_transport(resolved)
            try:
                transport.upload(remote_path, payload)
            finally:
                self._close_transport(transport)
        except WebDAVError as exc:
            raise BackupError(f"WebDAV operation failed during backup: {exc.message}", cause=exc) from exc
        except Exception as exc:
            raise BackupError(f"An unexpected error occurred during WebDAV backup: {exc}", cause=exc) from exc

        destination = f"{resolved.server_url.rstrip('/')}/{remote_path}"
        log.info("Backup of %r written to %s", self._provider_name, destination)
        return OperationResult(success=True, message=f"Backup successful to {destination}")

    def restore(self, settings: SettingsLike | None) -> OperationResult:
        """Download the JSON backup and replace every local item with it.

        The remote file is downloaded and parsed before anything is cleared.
        Once ``clear_all`` succeeds there is no rollback: if ``import_all``
        then fails, the provider is left empty.

        :raises SettingsMissing: If no server URL is configured.
        :raises ConfigurationError: If the settings are malformed.
        :raises RestoreError: If the download fails; ``cause`` holds the transport error.
        :raises CorruptBackup: If the downloaded file is not valid JSON.
        :raises StorageProviderError: If ``clear_all`` or ``import_all`` fails.
        """
        resolved = _coerce_settings(settings)
        remote_path = resolved.resolved_path
        source = f"{resolved.server_url.rstrip('/')}/{remote_path}"
        log.info("Starting restore of %r from %s", self._provider_name, source)

        try:
            transport = self._open_transport(resolved)
            try:
                text = transport.download(remote_path)
            finally:
                self._close_transport(transport)
        except WebDAVError as exc:
            raise RestoreError(f"WebDAV operation failed during restore: {exc.message}", cause=exc) from exc
        except Exception as exc:
            raise RestoreError(f"An unexpected error occurred during WebDAV download: {exc}", cause=exc) from exc

        try:
            snapshot: Snapshot = json.loads(text)
        except (ValueError, RecursionError) as exc:
            raise CorruptBackup(
                f"Failed to parse backup data: {exc}. The backup file might be corrupted.",
                cause=exc,
            ) from exc

        self._run_restore_phase(Phase.CLEAR_ALL, self._provider.clear_all)
        try:
            self._run_restore_phase(Phase.IMPORT_ALL, lambda: self._provider.import_all(snapshot))
        except StorageProviderError:
            log.warning("Restore of %r failed after clearing local data; the store is now empty", self._provider_name)
            raise

        log.info("Restore of %r from %s complete", self._provider_name, source)
        return OperationResult(success=True, message=f"Restore successful from {source}")

    def _run_restore_phase(self, phase: Phase, call: Callable[[], object]) -> None:
        try:
            call()
        except Exception as exc:
            raise StorageProviderError(
                f"Restore failed due to storage provider '{self._provider_name}' error during {phase.value}: "
                f"{_reason(exc, f'Storage provider operation {phase.value} failed.')}",
                provider=self._provider_name,
                phase=phase,
                cause=exc,
            ) from exc


def backup(
    settings: SettingsLike | None,
    provider: DataProvider,
    *,
    transport_factory: TransportFactory | None = None,
) -> OperationResult:
    """Back up *provider* to the WebDAV file described by *settings*.

    See :meth:`BackupService.backup`.
    """
    return BackupService(provider, transport_factory=transport_factory).backup(settings)


def restore(
    settings: SettingsLike | None,
    provider: DataProvider,
    *,
    transport_factory: TransportFactory | None = None,
) -> OperationResult:
    """Restore *provider* from the WebDAV file described by *settings*.

    See :meth:`BackupService.restore`.
    """
    return BackupService(provider, transport_factory=transport_factory).restore(settings)
