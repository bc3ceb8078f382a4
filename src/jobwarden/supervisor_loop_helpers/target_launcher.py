"""Spawn the target behind a replaceable data-forwarding stage."""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import IO, Optional, Sequence, Tuple

from ..logging_config import NOTICE
from ..policy import TargetCommand
from ..process_handle import ExitStatus, ProcessHandle
from ..process_terminator import ProcessTerminator

logger = logging.getLogger(__name__)

DEFAULT_FORWARD_COMMAND: Tuple[str, ...] = (sys.executable, "-m", "jobwarden.forward")


class TargetLauncher:
    """
    Starts the target with its stdin fed by a forwarding stage.

    The forwarding stage reads the job data (the supervisor's stdin or the
    job's data file) and writes it unmodified to the target. It runs as its own
    process so it can be swapped for something that observes the stream, such
    as ``tee``. The target is spawned directly, without a shell in between, so
    signals sent to its handle reach the real backend.
    """

    def __init__(
        self,
        terminator: ProcessTerminator,
        *,
        data_source: Optional[IO[bytes]] = None,
        forward_command: Optional[Sequence[str]] = None,
    ) -> None:
        self._terminator = terminator
        self._data_source = data_source
        self._forward_command = tuple(forward_command) if forward_command else DEFAULT_FORWARD_COMMAND
        self._forwarder: Optional[ProcessHandle] = None

    def launch(self, command: TargetCommand) -> ProcessHandle:
        """Start forwarding stage and target; raises ``OSError`` if either cannot start."""
        forwarder = ProcessHandle.spawn(
            self._forward_command,
            label="data forwarder",
            stdin=self._data_source,
            stdout=subprocess.PIPE,
        )
        self._forwarder = forwarder
        logger.debug("Started data forwarding stage as PID %d: %s", forwarder.pid, " ".join(self._forward_command))

        try:
            target = ProcessHandle.spawn(
                command.argv,
                executable=str(command.executable),
                label=command.describe(),
                stdin=forwarder.stdout,
                env=dict(command.env),
            )
        finally:
            # The target holds its own copy of the read end now.
            if forwarder.stdout is not None:
                forwarder.stdout.close()

        logger.log(NOTICE, "Launched target %s as PID %d", command.describe(), target.pid)
        return target

    def release(self) -> Optional[ExitStatus]:
        """Stop the forwarding stage if it is still running and collect it once."""
        forwarder = self._forwarder
        if forwarder is None:
            return None
        self._forwarder = None

        stopped_by_us = False
        if forwarder.is_alive():
            logger.debug("Data forwarding stage PID %d still running; terminating it", forwarder.pid)
            self._terminator.terminate(forwarder)
            stopped_by_us = True
            if forwarder.is_alive():
                logger.error("Failed to stop data forwarding stage PID %d", forwarder.pid)
                return None

        status = forwarder.collect()
        if status.succeeded or stopped_by_us:
            logger.debug("Data forwarding stage PID %d ended with %s", forwarder.pid, status.describe())
        else:
            logger.warning("Data forwarding stage PID %d ended with %s", forwarder.pid, status.describe())
        return status


__all__ = ["DEFAULT_FORWARD_COMMAND", "TargetLauncher"]
