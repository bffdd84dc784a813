"""Shared test fixtures and marker registration."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from remote_backup._transport import WebDAVTransport
from remote_backup.providers import MemoryProvider

if TYPE_CHECKING:
    from collections.abc import Iterator


def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires the optional webdav4 client")


@pytest.fixture
def client() -> MagicMock:
    """A fake low-level WebDAV client whose calls succeed by default."""
    fake = MagicMock(name="client")
    fake.base_url = "https://dav.example.com/remote.php/dav"
    fake.info.return_value = {"type": "directory"}
    return fake


@pytest.fixture
def transport(client: MagicMock) -> Iterator[WebDAVTransport]:
    with WebDAVTransport(client) as t:
        yield t


@pytest.fixture
def provider() -> MemoryProvider:
    return MemoryProvider({"prompts": [{"id": 1, "text": "hello"}], "settings": {"theme": "dark"}})
