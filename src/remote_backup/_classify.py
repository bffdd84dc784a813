"""Translation of raw client failures into the error taxonomy."""

from __future__ import annotations

import socket
from typing import Optional

import httpx

from remote_backup._errors import (
    AuthenticationFailed,
    ConnectionFailed,
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
    RateLimited,
    ResourceConflict,
    UploadFailed,
    WebDAVError,
    is_classified,
)

_CONNECTION_SIGNATURES = (
    "enotfound",
    "econnrefused",
    "etimedout",
    "ehostunreach",
    "getaddrinfo",
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "connection refused",
    "timed out",
    "no route to host",
    "host is unreachable",
    "network is unreachable",
)

_NETWORK_SIGNATURES = ("network request failed",)

_STATUS_KINDS = {
    400: ErrorKind.INVALID_PATH,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.FORBIDDEN,
    407: ErrorKind.AUTHENTICATION,
    409: ErrorKind.CONFLICT,
    429: ErrorKind.RATE_LIMITED,
    507: ErrorKind.INSUFFICIENT_STORAGE,
}

# webdav4 raises these without a status attribute.
_WEBDAV4_STATUS = {
    "ResourceNotFound": 404,
    "ForbiddenOperation": 403,
    "InsufficientStorage": 507,
    "ResourceConflict": 409,
}

_DIRECTORY_OPERATIONS = frozenset({Operation.CREATE_DIRECTORY, Operation.LIST_DIRECTORY})

_ERROR_CLASSES: dict[ErrorKind, type[WebDAVError]] = {
    ErrorKind.CONNECTION: ConnectionFailed,
    ErrorKind.NETWORK: NetworkFailure,
    ErrorKind.AUTHENTICATION: AuthenticationFailed,
    ErrorKind.FORBIDDEN: Forbidden,
    ErrorKind.FILE_NOT_FOUND: FileNotFound,
    ErrorKind.DIRECTORY_NOT_FOUND: DirectoryNotFound,
    ErrorKind.INVALID_PATH: InvalidPath,
    ErrorKind.CONFLICT: ResourceConflict,
    ErrorKind.INSUFFICIENT_STORAGE: InsufficientStorage,
    ErrorKind.RATE_LIMITED: RateLimited,
    ErrorKind.FILE_OPERATION: FileOperationError,
    ErrorKind.UPLOAD: UploadFailed,
    ErrorKind.DOWNLOAD: DownloadFailed,
}


def status_code_of(exc: BaseException) -> Optional[int]:
    """Extract an HTTP status code from a client exception, if it carries one."""
    for candidate in (
        getattr(exc, "status_code", None),
        getattr(getattr(exc, "response", None), "status_code", None),
        getattr(exc, "status", None),
    ):
        if isinstance(candidate, int):
            return candidate
    for cls in type(exc).__mro__:
        if cls.__name__ in _WEBDAV4_STATUS:
            return _WEBDAV4_STATUS[cls.__name__]
    return None


def already_exists(exc: BaseException) -> bool:
    """Return ``True`` if *exc* reports that a collection already exists (MKCOL 405)."""
    if any(cls.__name__ == "ResourceAlreadyExists" for cls in type(exc).__mro__):
        return True
    return status_code_of(exc) == 405


def is_directory_target(operation: Operation, path: str, *, directory: bool = False) -> bool:
    """Return ``True`` if a 404 for this call means a missing directory."""
    return directory or path.endswith("/") or operation in _DIRECTORY_OPERATIONS


def classify(
    status: Optional[int],
    message: str,
    operation: Operation,
    path: str,
    *,
    directory: bool = False,
) -> ErrorKind:
    """Map a failure to its :class:`ErrorKind`.

    Network signatures in *message* win over *status* because some failures
    never reach the HTTP layer.

    :param status: HTTP status code, or ``None`` if no response was received.
    :param message: The raw error message.
    :param operation: The attempted operation.
    :param path: The remote path of the attempted operation.
    :param directory: ``True`` if *path* is known to name a directory.
    """
    lowered = message.lower()
    if any(sig in lowered for sig in _CONNECTION_SIGNATURES):
        return ErrorKind.CONNECTION
    if any(sig in lowered for sig in _NETWORK_SIGNATURES):
        return ErrorKind.NETWORK
    if status == 404:
        if is_directory_target(operation, path, directory=directory):
            return ErrorKind.DIRECTORY_NOT_FOUND
        return ErrorKind.FILE_NOT_FOUND
    if status in _STATUS_KINDS:
        return _STATUS_KINDS[status]
    if operation is Operation.WRITE:
        return ErrorKind.UPLOAD
    if operation is Operation.READ:
        return ErrorKind.DOWNLOAD
    return ErrorKind.FILE_OPERATION


def _kind_from_type(exc: BaseException) -> Optional[ErrorKind]:
    if isinstance(exc, (httpx.ConnectError, httpx.TimeoutException, socket.gaierror, ConnectionError, TimeoutError)):
        return ErrorKind.CONNECTION
    if isinstance(exc, httpx.TransportError):
        return ErrorKind.NETWORK
    return None


def _message_for(kind: ErrorKind, detail: str, path: str, operation: Operation, server_url: str) -> str:
    if kind is ErrorKind.CONNECTION:
        return f"Failed to connect to WebDAV server at {server_url}. Please check the URL and network connection."
    if kind is ErrorKind.NETWORK:
        return detail or "A network error occurred while communicating with the WebDAV server."
    if kind is ErrorKind.AUTHENTICATION:
        return "Authentication failed. Please check your WebDAV username and password."
    if kind is ErrorKind.FORBIDDEN:
        return f"Access forbidden to {operation.value} '{path}'. Please check permissions."
    if kind is ErrorKind.FILE_NOT_FOUND:
        return f"File not found at WebDAV path: {path}"
    if kind is ErrorKind.DIRECTORY_NOT_FOUND:
        return f"Directory not found at WebDAV path: {path}"
    if kind is ErrorKind.INVALID_PATH:
        return f"Invalid WebDAV path: '{path}'. {detail or 'Invalid path specified.'}"
    if kind is ErrorKind.INSUFFICIENT_STORAGE:
        return "Insufficient storage on the WebDAV server."
    if kind is ErrorKind.RATE_LIMITED:
        return "Too many requests to the WebDAV server. Please try again later."
    if kind is ErrorKind.CONFLICT:
        detail = f"Conflict: {detail}"
    elif kind is ErrorKind.UPLOAD:
        detail = detail or "Upload operation failed"
    elif kind is ErrorKind.DOWNLOAD:
        detail = detail or "Download operation failed"
    return f"Failed to {operation.value} file/directory '{path}': {detail}"


def build_error(
    kind: ErrorKind,
    detail: str,
    path: str,
    operation: Operation,
    *,
    server_url: str = "",
    status: Optional[int] = None,
    cause: Optional[BaseException] = None,
) -> WebDAVError:
    """Construct the taxonomy error for *kind*."""
    cls = _ERROR_CLASSES[kind]
    message = _message_for(kind, detail, path, operation, server_url)
    return cls(message, path=path, operation=operation, status=status, cause=cause)


def translate(
    exc: BaseException,
    path: str,
    operation: Operation,
    *,
    server_url: str = "",
    directory: bool = False,
) -> WebDAVError:
    """Translate *exc* into a taxonomy error, passing classified errors through.

    :param exc: The exception raised by the client.
    :param path: The remote path of the attempted operation.
    :param operation: The attempted operation.
    :param server_url: Server URL used in connection failure messages.
    :param directory: ``True`` if *path* is known to name a directory.
    """
    if is_classified(exc):
        return exc  # type: ignore[return-value]
    detail = str(exc)
    status = status_code_of(exc)
    kind = _kind_from_type(exc) or classify(status, detail, operation, path, directory=directory)
    return build_error(kind, detail, path, operation, server_url=server_url, status=status, cause=exc)
