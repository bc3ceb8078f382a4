"""
Supervise one target process while running a check command around it.

Two modes, chosen by the attempt limit:

- single attempt (``max_attempts == 1``): the check command starts one time
  unit before the target and is stopped one time unit after the target has
  ended. The loop itself only waits.
- repeated (any other limit, 0 meaning unlimited): every iteration runs the
  check command for up to ``delay_seconds`` and then waits out the rest of
  the delay.

Each iteration while the target is alive counts as an attempt. Once the count
passes a positive limit the target's whole process tree is terminated.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, Dict, Optional

from .logging_config import NOTICE
from .policy import MonitorPolicy
from .process_handle import ExitStatus, ProcessHandle
from .supervisor_loop_helpers import AttemptCounter, wait_while_alive

if TYPE_CHECKING:
    from .check_runner import CheckRunner
    from .exit_code_resolver import ExitCodeResolver
    from .process_terminator import ProcessTerminator
    from .supervisor_loop_helpers import TargetLauncher

logger = logging.getLogger(__name__)

TIME_UNIT_SECONDS = 1.0
FAST_CHECK_PAUSE_UNITS = 0.1
TARGET_PID_ENV = "JOBWARDEN_TARGET_PID"


class SupervisorLoop:
    """Drives target launch, the check/delay/attempt policy and final status resolution."""

    def __init__(
        self,
        policy: MonitorPolicy,
        *,
        launcher: "TargetLauncher",
        check_runner: "CheckRunner",
        terminator: "ProcessTerminator",
        resolver: "ExitCodeResolver",
        sleep: Callable[[float], None] = time.sleep,
        time_unit: float = TIME_UNIT_SECONDS,
    ) -> None:
        self._policy = policy
        self._launcher = launcher
        self._check_runner = check_runner
        self._terminator = terminator
        self._resolver = resolver
        self._sleep = sleep
        self._time_unit = time_unit
        self.attempts = AttemptCounter()

    def run(self) -> int:
        """Run the whole supervision and return the exit code to report."""
        policy = self._policy
        logger.log(NOTICE, "Supervising %s: %s", policy.target_command.describe(), policy.describe())

        pre_check: Optional[ProcessHandle] = None
        if policy.single_attempt:
            pre_check = self._start_pre_check()

        try:
            target = self._launcher.launch(policy.target_command)
        except OSError as exc:
            logger.error("Failed to launch target %s: %s", policy.target_command.describe(), exc)
            self._launcher.release()
            if policy.single_attempt:
                self._finish_pre_check(pre_check)
            return self._resolver.resolve(policy.exit_code_policy, ExitStatus.unavailable(), forced=False)

        forced = self._monitor(target)
        status = self._collect_target(target)
        self._launcher.release()
        if policy.single_attempt:
            self._finish_pre_check(pre_check)

        return self._resolver.resolve(policy.exit_code_policy, status, forced=forced)

    # ------------------------------------------------------------------
    # Single-attempt mode
    # ------------------------------------------------------------------

    def _start_pre_check(self) -> Optional[ProcessHandle]:
        handle = None
        if self._policy.check_is_sleep:
            logger.log(NOTICE, "Check command is 'sleep'; nothing to launch before the target")
        else:
            handle = self._launch_check(target=None)
        # Give the check command a head start on the target.
        self._sleep(self._time_unit)
        return handle

    def _finish_pre_check(self, handle: Optional[ProcessHandle]) -> None:
        self._sleep(self._time_unit)
        if handle is None:
            logger.debug("No pre-launched check command to stop")
            return
        self._check_runner.terminate_and_collect(handle)

    # ------------------------------------------------------------------
    # Monitoring loop
    # ------------------------------------------------------------------

    def _monitor(self, target: ProcessHandle) -> bool:
        """Iterate while the target runs; ``True`` when the attempt limit forced termination."""
        policy = self._policy
        while target.is_alive():
            attempt = self.attempts.increment()
            if self.attempts.exceeds(policy.max_attempts):
                logger.warning(
                    "Target PID %d still running after %d attempt(s); terminating it",
                    target.pid,
                    policy.max_attempts,
                )
                result = self._terminator.terminate(target)
                if not result.fully_terminated:
                    logger.error("Termination of target PID %d left survivors: %s", target.pid, result.survivor_pids)
                return True

            limit = "unlimited" if policy.unlimited_attempts else str(policy.max_attempts)
            logger.log(NOTICE, "Attempt %d of %s: target PID %d is running", attempt, limit, target.pid)
            self._run_iteration(target)

        logger.log(NOTICE, "Target PID %d exited during attempt %d", target.pid, self.attempts.value)
        return False

    def _run_iteration(self, target: ProcessHandle) -> None:
        policy = self._policy
        delay = policy.delay_seconds

        if policy.single_attempt:
            self._wait(target, delay)
            return

        if policy.check_is_sleep:
            # Fast path: sleep the whole delay without polling the target.
            logger.debug("Sleeping %gs", delay)
            self._sleep(delay)
            return

        check = self._launch_check(target=target)
        if check is None:
            self._wait(target, delay)
            return

        if delay == 0:
            # Let a fast check command finish before it is terminated.
            self._sleep(FAST_CHECK_PAUSE_UNITS * self._time_unit)

        elapsed = wait_while_alive([target, check], delay, sleep=self._sleep, poll_interval=self._time_unit)
        self._check_runner.terminate_and_collect(check)
        self._wait(target, delay - elapsed)

    def _wait(self, target: ProcessHandle, budget: float) -> float:
        if budget > 0:
            logger.debug("Waiting up to %gs for target PID %d", budget, target.pid)
        return wait_while_alive([target], budget, sleep=self._sleep, poll_interval=self._time_unit)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _launch_check(self, *, target: Optional[ProcessHandle]) -> Optional[ProcessHandle]:
        env: Dict[str, str] = dict(self._policy.target_command.env)
        if target is not None:
            env[TARGET_PID_ENV] = str(target.pid)
        try:
            return self._check_runner.launch(self._policy.check_command, env=env)
        except OSError as exc:
            logger.error("Failed to launch check command %r: %s", self._policy.check_command, exc)
            return None

    def _collect_target(self, target: ProcessHandle) -> ExitStatus:
        if target.is_alive():
            logger.error("Target PID %d survived termination; its exit status is unavailable", target.pid)
            return ExitStatus.unavailable()

        status = target.collect()
        if status.succeeded:
            logger.log(NOTICE, "Target PID %d finished with %s", target.pid, status.describe())
        else:
            logger.error("Target PID %d finished with %s", target.pid, status.describe())
        return status


__all__ = ["FAST_CHECK_PAUSE_UNITS", "SupervisorLoop", "TARGET_PID_ENV", "TIME_UNIT_SECONDS"]
