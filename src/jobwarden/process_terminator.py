"""Terminate a process and all of its descendants: SIGTERM first, SIGKILL for survivors."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from .logging_config import NOTICE
from .process_handle import ProcessHandle
from .process_tree import ProcessTree

logger = logging.getLogger(__name__)

# Grace pauses (seconds)
ROOT_GRACE_SECONDS = 1.0
TREE_GRACE_SECONDS = 1.0
KILL_GRACE_SECONDS = 1.0


@dataclass(frozen=True)
class TerminationResult:
    """Outcome of a cascade; ``survivors`` lists processes still alive after SIGKILL."""

    survivors: Tuple[ProcessHandle, ...] = ()

    @classmethod
    def full(cls) -> "TerminationResult":
        return cls()

    @classmethod
    def partial(cls, survivors: Iterable[ProcessHandle]) -> "TerminationResult":
        return cls(survivors=tuple(survivors))

    @property
    def fully_terminated(self) -> bool:
        return not self.survivors

    @property
    def survivor_pids(self) -> List[int]:
        return [handle.pid for handle in self.survivors]


class ProcessTerminator:
    """
    Terminate a process tree with graceful shutdown then force kill if needed.

    Args:
        tree: Descendant enumerator; a fresh snapshot is taken on every call
        sleep: Pause function, replaced in tests
        root_grace_seconds: Pause right after the root was sent SIGTERM
        tree_grace_seconds: Extra pause when the root had descendants
        kill_grace_seconds: Pause after SIGKILL before survivors are counted
    """

    def __init__(
        self,
        tree: Optional[ProcessTree] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        root_grace_seconds: float = ROOT_GRACE_SECONDS,
        tree_grace_seconds: float = TREE_GRACE_SECONDS,
        kill_grace_seconds: float = KILL_GRACE_SECONDS,
    ) -> None:
        self._tree = tree if tree is not None else ProcessTree()
        self._sleep = sleep
        self.root_grace_seconds = root_grace_seconds
        self.tree_grace_seconds = tree_grace_seconds
        self.kill_grace_seconds = kill_grace_seconds

    def terminate(self, root: ProcessHandle) -> TerminationResult:
        snapshot = list(reversed(self._tree.enumerate_descendants(root)))
        if not snapshot:
            logger.debug("PID %d already exited; nothing to terminate", root.pid)
            return TerminationResult.full()

        logger.log(NOTICE, "Terminating PID %d (%s) and %d descendant(s)", root.pid, root.label, len(snapshot) - 1)
        self._send_graceful(snapshot, root)
        if len(snapshot) > 1:
            self._sleep(self.tree_grace_seconds)

        pending = [handle for handle in snapshot if handle.is_alive()]
        if not pending:
            logger.log(NOTICE, "PID %d and its descendants terminated gracefully", root.pid)
            return TerminationResult.full()

        return self._force_kill(pending)

    def _send_graceful(self, snapshot: List[ProcessHandle], root: ProcessHandle) -> None:
        for handle in snapshot:
            if not handle.is_alive():
                continue
            logger.log(NOTICE, "Sending SIGTERM to PID %d (%s)", handle.pid, handle.label)
            handle.terminate()
            if handle is root:
                self._sleep(self.root_grace_seconds)

    def _force_kill(self, pending: List[ProcessHandle]) -> TerminationResult:
        logger.warning("%d process(es) did not terminate gracefully; sending SIGKILL", len(pending))
        for handle in pending:
            logger.warning("Sending SIGKILL to PID %d (%s)", handle.pid, handle.label)
            handle.kill()
        self._sleep(self.kill_grace_seconds)

        survivors = [handle for handle in pending if handle.is_alive()]
        if not survivors:
            logger.log(NOTICE, "Remaining processes force killed")
            return TerminationResult.full()

        for handle in survivors:
            logger.error("PID %d (%s) is still running after SIGKILL", handle.pid, handle.label)
        return TerminationResult.partial(survivors)


__all__ = ["ProcessTerminator", "TerminationResult"]
