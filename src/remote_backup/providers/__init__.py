"""Reference data provider implementations."""

from remote_backup.providers._json_file import JsonFileProvider
from remote_backup.providers._memory import MemoryProvider

__all__ = ["JsonFileProvider", "MemoryProvider"]
