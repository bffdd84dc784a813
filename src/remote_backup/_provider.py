"""Data provider abstract base class: the bulk export/import/clear contract."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from remote_backup._errors import ConfigurationError

if TYPE_CHECKING:
    from remote_backup._types import Snapshot

REQUIRED_OPERATIONS = ("export_all", "import_all", "clear_all")


class DataProvider(abc.ABC):
    """Local data store that can be backed up and restored as a whole.

    Subclassing is optional: any object exposing the three bulk operations is
    accepted by :class:`~remote_backup.BackupService`.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Identifier used in error messages (e.g. ``'memory'``)."""

    @abc.abstractmethod
    def export_all(self) -> Snapshot:
        """Return a JSON-serializable snapshot of every stored item."""

    @abc.abstractmethod
    def import_all(self, snapshot: Snapshot) -> None:
        """Load a snapshot produced by :meth:`export_all` into an empty store."""

    @abc.abstractmethod
    def clear_all(self) -> None:
        """Remove every stored item."""


def provider_name(provider: object) -> str:
    """Return the provider's ``name``, falling back to its class name."""
    name = getattr(provider, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(provider).__name__


def validate_provider(provider: object) -> None:
    """Check that *provider* implements every bulk operation.

    :raises ConfigurationError: Naming the first missing operation.
    """
    for operation in REQUIRED_OPERATIONS:
        if not callable(getattr(provider, operation, None)):
            raise ConfigurationError(
                f"Data provider '{provider_name(provider)}' must implement {operation} method."
            )
