"""Immutable result models."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class OperationResult:
    """Outcome of a successful backup or restore.

    Failures are raised as exceptions, so ``success`` is ``True`` for every
    result the library returns.

    :param success: Whether the operation completed.
    :param message: Human-readable summary naming the remote file.
    """

    success: bool
    message: str | None = None
