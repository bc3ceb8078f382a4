"""Launch and reap the auxiliary check command."""

from __future__ import annotations

import logging
import signal
import subprocess
from typing import Mapping, Optional

from .logging_config import NOTICE
from .process_handle import ExitStatus, ProcessHandle
from .process_terminator import ProcessTerminator

logger = logging.getLogger(__name__)

SHELL = "/bin/sh"
_EXPECTED_SIGNALS = (signal.SIGTERM, signal.SIGKILL)


class CheckRunner:
    """Runs the operator-supplied check command line in a background shell.

    The check command is observational: its outcome is logged and never feeds
    into the target's lifecycle or the final exit code.
    """

    def __init__(self, terminator: ProcessTerminator, *, shell: str = SHELL) -> None:
        self._terminator = terminator
        self._shell = shell

    def launch(self, command: str, env: Optional[Mapping[str, str]] = None) -> ProcessHandle:
        """Start *command*; raises ``OSError`` when the shell cannot be spawned."""
        handle = ProcessHandle.spawn(
            [self._shell, "-c", command],
            label=f"check: {command}",
            stdin=subprocess.DEVNULL,
            env=dict(env) if env is not None else None,
        )
        logger.log(NOTICE, "Launched check command as PID %d: %s", handle.pid, command)
        return handle

    def terminate_and_collect(self, handle: ProcessHandle) -> Optional[ExitStatus]:
        """Stop the check command if needed and collect its status exactly once.

        Returns ``None`` when the process could not be stopped, in which case
        its status is deliberately left uncollected.
        """
        terminated_by_us = False
        if handle.is_alive():
            logger.log(NOTICE, "Check command PID %d still running; terminating it", handle.pid)
            result = self._terminator.terminate(handle)
            terminated_by_us = True
            if handle.is_alive():
                logger.error("Failed to terminate check command PID %d; leaving it uncollected", handle.pid)
                return None
            if not result.fully_terminated:
                logger.error("Descendants of check command PID %d survived: %s", handle.pid, result.survivor_pids)

        status = handle.collect()
        self._log_status(handle, status, terminated_by_us)
        return status

    @staticmethod
    def _log_status(handle: ProcessHandle, status: ExitStatus, terminated_by_us: bool) -> None:
        if status.succeeded:
            logger.log(NOTICE, "Check command PID %d finished with %s", handle.pid, status.describe())
        elif terminated_by_us and status.signal_number in _EXPECTED_SIGNALS:
            logger.log(NOTICE, "Check command PID %d stopped by %s", handle.pid, status.describe())
        else:
            logger.error("Check command PID %d failed with %s", handle.pid, status.describe())


__all__ = ["CheckRunner", "SHELL"]
