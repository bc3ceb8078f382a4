from __future__ import annotations

"""Dependency factory for SupervisorLoop."""


import time
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING, Callable, Optional, Sequence

if TYPE_CHECKING:
    from ..check_runner import CheckRunner
    from ..exit_code_resolver import ExitCodeResolver
    from ..process_terminator import ProcessTerminator
    from .target_launcher import TargetLauncher


@dataclass
class SupervisorDependencies:
    """Container for all SupervisorLoop dependencies."""

    terminator: "ProcessTerminator"
    check_runner: "CheckRunner"
    launcher: "TargetLauncher"
    resolver: "ExitCodeResolver"


class SupervisorDependenciesFactory:
    """Factory for creating SupervisorLoop dependencies."""

    @staticmethod
    def create(
        *,
        grace_seconds: float,
        data_source: Optional[IO[bytes]] = None,
        forward_command: Optional[Sequence[str]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> SupervisorDependencies:
        """Create all dependencies for SupervisorLoop."""
        from ..check_runner import CheckRunner
        from ..exit_code_resolver import ExitCodeResolver
        from ..process_terminator import ProcessTerminator
        from ..process_tree import ProcessTree
        from .target_launcher import TargetLauncher

        terminator = ProcessTerminator(
            ProcessTree(),
            sleep=sleep,
            root_grace_seconds=grace_seconds,
            tree_grace_seconds=grace_seconds,
            kill_grace_seconds=grace_seconds,
        )
        check_runner = CheckRunner(terminator)
        launcher = TargetLauncher(terminator, data_source=data_source, forward_command=forward_command)

        return SupervisorDependencies(
            terminator=terminator,
            check_runner=check_runner,
            launcher=launcher,
            resolver=ExitCodeResolver(),
        )
