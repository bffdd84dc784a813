"""WebDAV transport wrapper using webdav4."""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, runtime_checkable

from remote_backup._classify import already_exists, build_error, translate
from remote_backup._errors import NOT_FOUND_KINDS, ErrorKind, InvalidPath, Operation, WebDAVError
from remote_backup._path import parent_of
from remote_backup._settings import WebDAVOptions

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from types import TracebackType

    from remote_backup._types import UploadData

log = logging.getLogger(__name__)

_UNKNOWN_SERVER = "Unknown WebDAV Server"


@runtime_checkable
class WebDAVClient(Protocol):
    """Client surface the transport relies on (a subset of ``webdav4.client.Client``)."""

    def info(self, path: str) -> Mapping[str, Any]: ...

    def mkdir(self, path: str) -> None: ...

    def upload_fileobj(self, file_obj: BinaryIO, to_path: str, overwrite: bool = ...) -> None: ...

    def download_fileobj(self, from_path: str, file_obj: BinaryIO) -> None: ...

    def remove(self, path: str) -> None: ...


class WebDAVTransport:
    """Path-aware file operations on a WebDAV server.

    Every client failure is translated into a :class:`~remote_backup.WebDAVError`
    subclass; raw client exceptions never leave this class.

    :param target: Client options, or an already-constructed client.
    :raises InvalidPath: If options are given without a server URL.
    """

    def __init__(self, target: WebDAVOptions | WebDAVClient) -> None:
        if isinstance(target, WebDAVOptions):
            if not target.server_url:
                raise InvalidPath(
                    "Invalid WebDAV path: ''. Remote URL is not provided in WebDAV client options.",
                    path="",
                )
            self._options: WebDAVOptions | None = target
            self._client_instance: Any = None
            self._server_url = target.server_url
        else:
            self._options = None
            self._client_instance = target
            self._server_url = str(getattr(target, "base_url", "") or _UNKNOWN_SERVER)

    def __repr__(self) -> str:
        return f"WebDAVTransport(server_url={self._server_url!r})"

    @property
    def server_url(self) -> str:
        """Base URL of the server, as far as it is known."""
        return self._server_url

    # region: lazy client

    @property
    def client(self) -> Any:
        """The underlying client, built from options on first access."""
        if self._client_instance is None:
            from webdav4.client import Client  # type: ignore[import-untyped]

            opts = self._options
            assert opts is not None
            auth = (opts.username, opts.password or "") if opts.username else None
            log.debug("Creating WebDAV client for %s", opts.server_url)
            self._client_instance = Client(opts.server_url, auth=auth, timeout=opts.timeout, retry=False)
        return self._client_instance

    # endregion

    # region: error mapping

    @contextmanager
    def _errors(self, path: str, operation: Operation, *, directory: bool = False) -> Iterator[None]:
        """Map client exceptions to taxonomy errors."""
        try:
            yield
        except Exception as exc:
            raise translate(
                exc,
                path,
                operation,
                server_url=self._server_url,
                directory=directory,
            ) from exc

    # endregion

    # region: directory assurance

    def _makedirs(self, path: str) -> None:
        """Create *path* one segment at a time; existing segments are skipped."""
        parts = path.strip("/").split("/")
        for i in range(1, len(parts) + 1):
            segment = "/".join(parts[:i])
            try:
                self.client.mkdir(segment)
            except Exception as exc:
                if already_exists(exc):
                    continue
                raise translate(
                    exc,
                    path,
                    Operation.CREATE_DIRECTORY,
                    server_url=self._server_url,
                ) from exc

    def _ensure_parent(self, path: str) -> None:
        parent = parent_of(path)
        if parent is None:
            return
        try:
            with self._errors(parent, Operation.STAT, directory=True):
                info = self.client.info(parent)
        except WebDAVError as exc:
            if exc.kind not in NOT_FOUND_KINDS:
                # The write that follows reports this failure with full context.
                log.debug("Could not ensure directory %s exists: %s", parent, exc)
                return
            log.debug("Creating missing directory %s", parent)
            self._makedirs(parent)
            return
        if info.get("type") != "directory":
            raise build_error(
                ErrorKind.FILE_OPERATION,
                f"Path {parent} exists but is not a directory.",
                parent,
                Operation.CREATE_DIRECTORY,
                server_url=self._server_url,
            )

    # endregion

    # region: file operations

    def upload(self, path: str, data: UploadData) -> None:
        """Write *data* to *path*, replacing any existing file.

        Missing parent directories are created first.

        :raises FileOperationError: If the parent path exists as a file.
        """
        self._ensure_parent(path)
        with self._errors(path, Operation.WRITE):
            payload = data.encode("utf-8") if isinstance(data, str) else data
            self.client.upload_fileobj(io.BytesIO(payload), path, overwrite=True)
        log.debug("Uploaded %d bytes to %s", len(payload), path)

    def download(self, path: str) -> str:
        """Read the file at *path* as UTF-8 text.

        :raises FileNotFound: If the file does not exist.
        """
        with self._errors(path, Operation.READ):
            buf = io.BytesIO()
            self.client.download_fileobj(path, buf)
            return buf.getvalue().decode("utf-8")

    def path_exists(self, path: str) -> bool:
        """Check whether *path* exists.

        Only a not-found classification yields ``False``; any other failure is
        raised so callers can tell "missing" from "unknown".
        """
        try:
            with self._errors(path, Operation.STAT):
                self.client.info(path)
        except WebDAVError as exc:
            if exc.kind in NOT_FOUND_KINDS:
                return False
            raise
        return True

    def create_directory_recursive(self, path: str) -> None:
        """Create *path* and every missing ancestor."""
        self._makedirs(path)

    def delete_file(self, path: str) -> None:
        """Delete the file at *path*.

        :raises FileNotFound: If the file does not exist.
        """
        with self._errors(path, Operation.DELETE):
            self.client.remove(path)

    # endregion

    # region: lifecycle

    def close(self) -> None:
        """Release the HTTP connection pool of a client this transport built.

        Injected clients are left open; their owner closes them.
        """
        if self._options is None or self._client_instance is None:
            return
        http = getattr(self._client_instance, "http", None)
        if http is not None:
            http.close()
        self._client_instance = None

    def __enter__(self) -> WebDAVTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # endregion
