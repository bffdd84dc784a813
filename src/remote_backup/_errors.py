"""Error taxonomy for remote_backup.

Every failure surfaced by the library carries an :class:`ErrorKind` tag in its
``kind`` attribute. Transport failures derive from :class:`WebDAVError`;
orchestration failures derive directly from :class:`RemoteBackupError`.
"""

from __future__ import annotations

import enum
from typing import ClassVar, Optional


class ErrorKind(enum.Enum):
    """Closed set of failure kinds."""

    # transport
    CONNECTION = "connection"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    FILE_NOT_FOUND = "file_not_found"
    DIRECTORY_NOT_FOUND = "directory_not_found"
    INVALID_PATH = "invalid_path"
    CONFLICT = "conflict"
    INSUFFICIENT_STORAGE = "insufficient_storage"
    RATE_LIMITED = "rate_limited"
    FILE_OPERATION = "file_operation"
    UPLOAD = "upload"
    DOWNLOAD = "download"
    # backup / restore
    CONFIGURATION = "configuration"
    CONFIGURATION_MISSING = "configuration_missing"
    STORAGE_PROVIDER = "storage_provider"
    SERIALIZATION = "serialization"
    BACKUP = "backup"
    RESTORE = "restore"
    CORRUPT_BACKUP = "corrupt_backup"


NOT_FOUND_KINDS = frozenset({ErrorKind.FILE_NOT_FOUND, ErrorKind.DIRECTORY_NOT_FOUND})


class Operation(enum.Enum):
    """File operation attempted when a transport error occurred."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    STAT = "stat"
    CREATE_DIRECTORY = "create directory"
    LIST_DIRECTORY = "list directory"


class Phase(enum.Enum):
    """Bulk data provider operation that produced a storage failure."""

    EXPORT_ALL = "export_all"
    IMPORT_ALL = "import_all"
    CLEAR_ALL = "clear_all"


def is_classified(exc: BaseException) -> bool:
    """Return ``True`` if *exc* already carries a taxonomy tag."""
    return isinstance(getattr(exc, "kind", None), ErrorKind)


class RemoteBackupError(Exception):
    """Base class for all remote_backup errors.

    :param message: Human-readable error description.
    :param cause: The lower-level error this one was derived from, if any.
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str = "", *, cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)

    def _context(self) -> list[str]:
        return []

    def __str__(self) -> str:
        parts = [self.message, *self._context()]
        return " | ".join(p for p in parts if p)

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(self.message), *self._context()]
        if self.cause is not None:
            args.append(f"cause={type(self.cause).__name__}")
        return f"{cls}({', '.join(args)})"


# region: transport errors


class WebDAVError(RemoteBackupError):
    """Base class for failures raised by the WebDAV transport.

    :param path: The remote path involved, if any.
    :param operation: The attempted file operation, if known.
    :param status: The HTTP status code, if one was received.
    """

    kind = ErrorKind.FILE_OPERATION

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        operation: Optional[Operation] = None,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.path = path
        self.operation = operation
        self.status = status
        super().__init__(message, cause=cause)

    def _context(self) -> list[str]:
        parts = []
        if self.path is not None:
            parts.append(f"path={self.path!r}")
        if self.operation is not None:
            parts.append(f"operation={self.operation.value!r}")
        if self.status is not None:
            parts.append(f"status={self.status}")
        return parts


class ConnectionFailed(WebDAVError):
    """Raised when the server cannot be reached (DNS, refused, timeout, unreachable)."""

    kind = ErrorKind.CONNECTION


class NetworkFailure(WebDAVError):
    """Raised for transport-level failures that are not connection failures."""

    kind = ErrorKind.NETWORK


class AuthenticationFailed(WebDAVError):
    """Raised on HTTP 401 or 407."""

    kind = ErrorKind.AUTHENTICATION


class Forbidden(WebDAVError):
    """Raised on HTTP 403."""

    kind = ErrorKind.FORBIDDEN


class FileNotFound(WebDAVError):
    """Raised on HTTP 404 for a file-targeted operation."""

    kind = ErrorKind.FILE_NOT_FOUND


class DirectoryNotFound(WebDAVError):
    """Raised on HTTP 404 for a directory-targeted operation."""

    kind = ErrorKind.DIRECTORY_NOT_FOUND


class InvalidPath(WebDAVError):
    """Raised on HTTP 400 or when the transport has no server URL."""

    kind = ErrorKind.INVALID_PATH


class InsufficientStorage(WebDAVError):
    """Raised on HTTP 507."""

    kind = ErrorKind.INSUFFICIENT_STORAGE


class RateLimited(WebDAVError):
    """Raised on HTTP 429."""

    kind = ErrorKind.RATE_LIMITED


class FileOperationError(WebDAVError):
    """Raised when a file operation fails for any other reason."""

    kind = ErrorKind.FILE_OPERATION


class ResourceConflict(FileOperationError):
    """Raised on HTTP 409."""

    kind = ErrorKind.CONFLICT


class UploadFailed(FileOperationError):
    """Raised when a write fails without a more specific classification."""

    kind = ErrorKind.UPLOAD


class DownloadFailed(FileOperationError):
    """Raised when a read fails without a more specific classification."""

    kind = ErrorKind.DOWNLOAD


# endregion

# region: backup / restore errors


class ConfigurationError(RemoteBackupError):
    """Raised for invalid connection settings or an incomplete data provider."""

    kind = ErrorKind.CONFIGURATION


class SettingsMissing(ConfigurationError):
    """Raised when the WebDAV server URL is not configured."""

    kind = ErrorKind.CONFIGURATION_MISSING

    def __init__(
        self,
        message: str = "WebDAV settings are missing or incomplete. Please configure them before proceeding.",
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, cause=cause)


class StorageProviderError(RemoteBackupError):
    """Raised when a data provider bulk operation fails.

    :param provider: Name of the data provider.
    :param phase: The bulk operation that failed.
    """

    kind = ErrorKind.STORAGE_PROVIDER

    def __init__(
        self,
        message: str = "",
        *,
        provider: str,
        phase: Phase,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.provider = provider
        self.phase = phase
        super().__init__(message, cause=cause)

    def _context(self) -> list[str]:
        return [f"provider={self.provider!r}", f"phase={self.phase.value!r}"]


class BackupError(RemoteBackupError):
    """Raised when a backup fails outside the data provider."""

    kind = ErrorKind.BACKUP


class SerializationError(BackupError):
    """Raised when the exported snapshot cannot be serialized to JSON."""

    kind = ErrorKind.SERIALIZATION


class RestoreError(RemoteBackupError):
    """Raised when a restore fails outside the data provider."""

    kind = ErrorKind.RESTORE


class CorruptBackup(RestoreError):
    """Raised when the downloaded backup is not valid JSON."""

    kind = ErrorKind.CORRUPT_BACKUP


# endregion
