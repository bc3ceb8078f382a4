"""Attempt bookkeeping for the supervision loop."""

from __future__ import annotations


class AttemptCounter:
    """Counts loop iterations while the target is alive; never decreases."""

    def __init__(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        self._value += 1
        return self._value

    def exceeds(self, max_attempts: int) -> bool:
        """True once the count is past a positive limit; a limit of 0 means unlimited."""
        return max_attempts > 0 and self._value > max_attempts


__all__ = ["AttemptCounter"]
