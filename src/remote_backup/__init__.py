"""Whole-store backup and restore over WebDAV."""

from remote_backup._classify import classify, translate
from remote_backup._errors import (
    AuthenticationFailed,
    BackupError,
    ConfigurationError,
    ConnectionFailed,
    CorruptBackup,
    DirectoryNotFound,
    DownloadFailed,
    ErrorKind,
    FileNotFound,
    FileOperationError,
    Forbidden,
    InsufficientStorage,
    InvalidPath,
    NetworkFailure,
    Operation,
    Phase,
    RateLimited,
    RemoteBackupError,
    ResourceConflict,
    RestoreError,
    SerializationError,
    SettingsMissing,
    StorageProviderError,
    UploadFailed,
    WebDAVError,
    is_classified,
)
from remote_backup._models import OperationResult
from remote_backup._provider import DataProvider
from remote_backup._service import BackupService, backup, restore
from remote_backup._settings import DEFAULT_REMOTE_PATH, ConnectionSettings, WebDAVOptions
from remote_backup._transport import WebDAVClient, WebDAVTransport

__version__ = "0.1.0"

__all__ = [
    # Core
    "BackupService",
    "backup",
    "restore",
    "WebDAVTransport",
    "WebDAVClient",
    "DataProvider",
    # Settings & Models
    "ConnectionSettings",
    "WebDAVOptions",
    "DEFAULT_REMOTE_PATH",
    "OperationResult",
    # Classification
    "ErrorKind",
    "Operation",
    "Phase",
    "classify",
    "translate",
    "is_classified",
    # Errors
    "RemoteBackupError",
    "WebDAVError",
    "ConnectionFailed",
    "NetworkFailure",
    "AuthenticationFailed",
    "Forbidden",
    "FileNotFound",
    "DirectoryNotFound",
    "InvalidPath",
    "ResourceConflict",
    "InsufficientStorage",
    "RateLimited",
    "FileOperationError",
    "UploadFailed",
    "DownloadFailed",
    "ConfigurationError",
    "SettingsMissing",
    "StorageProviderError",
    "BackupError",
    "SerializationError",
    "RestoreError",
    "CorruptBackup",
    # Version
    "__version__",
]
