"""Supervise a print backend while a check command watches it.

Typical use is as a wrapper backend:

    DEVICE_URI="jobwarden:/inherit/3/10/lpstat%20-p/socket://printer:9100"

runs the ``socket`` backend, runs ``lpstat -p`` every 10 seconds for at most
three attempts, then terminates the backend's process tree.
"""

from jobwarden.exit_code_resolver import ExitCodeResolver
from jobwarden.policy import ExitCodePolicy, MonitorPolicy, TargetCommand
from jobwarden.process_handle import ExitStatus, ProcessHandle
from jobwarden.process_terminator import ProcessTerminator, TerminationResult
from jobwarden.process_tree import ProcessTree
from jobwarden.status_codes import BackendStatus
from jobwarden.supervisor_loop import SupervisorLoop

__all__ = [
    "BackendStatus",
    "ExitCodePolicy",
    "ExitCodeResolver",
    "ExitStatus",
    "MonitorPolicy",
    "ProcessHandle",
    "ProcessTerminator",
    "ProcessTree",
    "SupervisorLoop",
    "TargetCommand",
    "TerminationResult",
]
