"""Handles for the processes the supervisor watches, signals and reaps."""

from __future__ import annotations

import logging
import signal
import subprocess
from dataclasses import dataclass
from typing import IO, Any, Optional, Sequence

import psutil

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitStatus:
    """Collected status of a process: negative return codes mean "killed by signal"."""

    returncode: Optional[int]

    @classmethod
    def unavailable(cls) -> "ExitStatus":
        return cls(returncode=None)

    @property
    def available(self) -> bool:
        return self.returncode is not None

    @property
    def exit_code(self) -> Optional[int]:
        if self.returncode is None or self.returncode < 0:
            return None
        return self.returncode

    @property
    def signal_number(self) -> Optional[int]:
        if self.returncode is None or self.returncode >= 0:
            return None
        return -self.returncode

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        if self.returncode is None:
            return "unknown status"
        signum = self.signal_number
        if signum is None:
            return f"exit code {self.returncode}"
        try:
            return f"signal {signum} ({signal.Signals(signum).name})"
        except ValueError:
            return f"signal {signum}"


class ProcessHandle:
    """
    A process the supervisor can test, signal and (when it spawned it) reap.

    Liveness checks never reap: a zombie counts as not alive but keeps its
    exit status until :meth:`collect` is called. Collection happens at most
    once per handle; a second attempt raises instead of blocking or
    returning a stale value.
    """

    def __init__(
        self,
        process: psutil.Process,
        *,
        popen: Optional[subprocess.Popen] = None,
        label: Optional[str] = None,
    ) -> None:
        self._process = process
        self._popen = popen
        self._label = label
        self._status: Optional[ExitStatus] = None

    @classmethod
    def spawn(cls, args: Sequence[str], *, label: Optional[str] = None, **popen_kwargs: Any) -> "ProcessHandle":
        """Start *args* as a child process and wrap it. Raises ``OSError`` if it cannot start."""
        popen = subprocess.Popen(list(args), **popen_kwargs)
        # An unreaped child stays in the process table, so this cannot miss it.
        process = psutil.Process(popen.pid)
        return cls(process, popen=popen, label=label)

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def process(self) -> psutil.Process:
        return self._process

    @property
    def owned(self) -> bool:
        return self._popen is not None

    @property
    def collected(self) -> bool:
        return self._status is not None

    @property
    def stdout(self) -> Optional[IO[bytes]]:
        if self._popen is None:
            return None
        return self._popen.stdout

    @property
    def label(self) -> str:
        if self._label is None:
            try:
                cmdline = self._process.cmdline()
                self._label = " ".join(cmdline) if cmdline else self._process.name()
            except psutil.Error:  # policy_guard: allow-silent-handler
                self._label = "?"
        return self._label

    def is_alive(self) -> bool:
        if self._status is not None:
            return False
        try:
            return self._process.is_running() and self._process.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
            return False
        except psutil.AccessDenied:  # policy_guard: allow-silent-handler
            # Status is unreadable but is_running() already said the PID is ours.
            return True

    def send_signal(self, signum: int) -> bool:
        """Deliver *signum*; ``False`` when the process is gone or refuses it."""
        if self._status is not None:
            return False
        try:
            self._process.send_signal(signum)
        except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
            logger.debug("PID %d exited before signal %d was delivered", self.pid, signum)
            return False
        except psutil.AccessDenied:
            logger.error("Permission denied sending signal %d to PID %d (%s)", signum, self.pid, self.label)
            return False
        return True

    def terminate(self) -> bool:
        return self.send_signal(signal.SIGTERM)

    def kill(self) -> bool:
        return self.send_signal(signal.SIGKILL)

    def collect(self) -> ExitStatus:
        """Block until the process exits and return its status, exactly once."""
        if self._popen is None:
            raise RuntimeError(f"PID {self.pid} was not spawned by this supervisor; its status cannot be collected")
        if self._status is not None:
            raise RuntimeError(f"Exit status of PID {self.pid} was already collected")
        self._status = ExitStatus(self._popen.wait())
        return self._status

    def __repr__(self) -> str:
        return f"ProcessHandle(pid={self.pid}, owned={self.owned}, collected={self.collected})"


__all__ = ["ExitStatus", "ProcessHandle"]
