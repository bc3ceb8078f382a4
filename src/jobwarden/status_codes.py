"""Backend exit statuses understood by the print spooler."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional


class BackendStatus(IntEnum):
    """Exit codes a backend reports back to the scheduler."""

    OK = 0
    FAILED = 1
    AUTH_REQUIRED = 2
    HOLD = 3
    STOP = 4
    CANCEL = 5
    RETRY = 6
    RETRY_CURRENT = 7


def status_name(code: int) -> str:
    """Return the symbolic name for *code*, or the number itself when it has none."""
    try:
        return BackendStatus(code).name
    except ValueError:
        return str(code)


def lookup_status(name: str) -> Optional[BackendStatus]:
    """Find a status by case-insensitive name, or ``None`` when unknown."""
    return BackendStatus.__members__.get(name.strip().upper())


__all__ = ["BackendStatus", "lookup_status", "status_name"]
