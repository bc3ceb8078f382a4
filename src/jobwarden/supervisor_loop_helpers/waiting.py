"""Bounded, coarse-grained polling waits."""

from __future__ import annotations

from typing import Callable, Sequence

from ..process_handle import ProcessHandle


def wait_while_alive(
    handles: Sequence[ProcessHandle],
    budget_seconds: float,
    *,
    sleep: Callable[[float], None],
    poll_interval: float,
) -> float:
    """Sleep in steps of *poll_interval* until the budget is spent or any handle exits.

    Returns the time actually spent waiting.
    """
    elapsed = 0.0
    while elapsed < budget_seconds and all(handle.is_alive() for handle in handles):
        step = min(poll_interval, budget_seconds - elapsed)
        sleep(step)
        elapsed += step
    return elapsed


__all__ = ["wait_while_alive"]
