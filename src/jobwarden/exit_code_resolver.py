"""Map the target's outcome and the configured policy onto the supervisor's exit code."""

from __future__ import annotations

import logging

from .logging_config import NOTICE
from .policy import ExitCodePolicy
from .process_handle import ExitStatus
from .status_codes import BackendStatus, status_name

logger = logging.getLogger(__name__)


def _severity(code: int) -> int:
    return NOTICE if code == 0 else logging.ERROR


class ExitCodeResolver:
    """Resolve the final exit code.

    A fixed policy always wins. Under ``inherit`` the target's own exit code is
    reused, except that a target we had to terminate never reports success,
    and a target without a usable exit code (killed by a signal, never
    collected) reports FAILED.
    """

    def resolve(self, policy: ExitCodePolicy, status: ExitStatus, *, forced: bool) -> int:
        if not policy.inherit:
            return self._resolve_fixed(policy.fixed_code, status, forced)

        inherited = self._inherited_code(status)
        if forced and inherited == 0:
            code = int(BackendStatus.FAILED)
            logger.error(
                "Target was terminated after exhausting its attempts but reported %s; exiting with %s instead of success",
                status.describe(),
                status_name(code),
            )
            return code

        if forced:
            logger.log(
                _severity(inherited),
                "Target was terminated after exhausting its attempts; inheriting exit code %d (%s)",
                inherited,
                status_name(inherited),
            )
            return inherited

        logger.log(
            _severity(inherited),
            "Target finished with %s; inheriting exit code %d (%s)",
            status.describe(),
            inherited,
            status_name(inherited),
        )
        return inherited

    @staticmethod
    def _resolve_fixed(code: int, status: ExitStatus, forced: bool) -> int:
        ending = "terminated after exhausting its attempts" if forced else "finished on its own"
        logger.log(
            _severity(code),
            "Target %s with %s; exiting with fixed code %d (%s)",
            ending,
            status.describe(),
            code,
            status_name(code),
        )
        return code

    @staticmethod
    def _inherited_code(status: ExitStatus) -> int:
        if status.exit_code is not None:
            return status.exit_code
        logger.error("Target has no exit code to inherit (%s); using %s", status.describe(), BackendStatus.FAILED.name)
        return int(BackendStatus.FAILED)


__all__ = ["ExitCodeResolver"]
