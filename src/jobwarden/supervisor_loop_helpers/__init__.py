"""Helper modules for SupervisorLoop."""

from .attempt_counter import AttemptCounter
from .target_launcher import DEFAULT_FORWARD_COMMAND, TargetLauncher
from .waiting import wait_while_alive

__all__ = [
    "AttemptCounter",
    "DEFAULT_FORWARD_COMMAND",
    "TargetLauncher",
    "wait_while_alive",
]
