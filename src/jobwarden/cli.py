"""
Command-line entry point.

The program behaves like a print spooler backend:

- no arguments: print one device-discovery line and exit 0
- ``job-id user title copies options [file]``: supervise the backend named by
  the device locator in ``DEVICE_URI``
- anything else: usage on stderr, exit FAILED

Configuration errors exit with STOP so the queue is held until an operator
fixes the device locator.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import IO, List, Optional, Sequence

from .config import ConfigurationError, RuntimeSettings
from .locator import build_policy, parse_locator
from .logging_config import setup_logging
from .status_codes import BackendStatus
from .supervisor_loop import SupervisorLoop
from .supervisor_loop_helpers.dependencies_factory import SupervisorDependenciesFactory

logger = logging.getLogger(__name__)

DEFAULT_SCHEME = "jobwarden"
DISCOVERY_DESCRIPTION = "Job watchdog (supervised backend)"
JOB_ARGUMENT_COUNT = 5


def scheme_from_program(program: str) -> str:
    """Backends are installed under their scheme name; fall back for ``python -m``."""
    name = Path(program).name
    if not name or name.endswith(".py") or name.startswith("-"):
        return DEFAULT_SCHEME
    return name


def discovery_line(scheme: str) -> str:
    return f'network {scheme} "Unknown" "{DISCOVERY_DESCRIPTION}"'


def usage(scheme: str) -> str:
    return f"Usage: {scheme} job-id user title copies options [file]"


def _open_data_source(path: Optional[str]) -> Optional[IO[bytes]]:
    if path is None:
        return None
    return open(path, "rb")


def main(argv: Optional[Sequence[str]] = None) -> int:
    arguments: List[str] = list(sys.argv if argv is None else argv)
    scheme = scheme_from_program(arguments[0] if arguments else "")
    job_args = arguments[1:]
    setup_logging(scheme)

    if not job_args:
        print(discovery_line(scheme))
        return int(BackendStatus.OK)

    if len(job_args) not in (JOB_ARGUMENT_COUNT, JOB_ARGUMENT_COUNT + 1):
        print(usage(scheme), file=sys.stderr)
        return int(BackendStatus.FAILED)

    try:
        settings = RuntimeSettings.from_env()
        fields = parse_locator(settings.device_uri)
        setup_logging(fields.scheme, debug=settings.debug, log_dir=settings.log_dir)
        policy = build_policy(
            fields,
            job_args[:JOB_ARGUMENT_COUNT],
            backend_dir=settings.backend_dir,
            base_env=os.environ,
        )
    except (ConfigurationError, OSError) as exc:
        logger.error("Configuration error: %s", exc)
        return int(BackendStatus.STOP)

    data_path = job_args[JOB_ARGUMENT_COUNT] if len(job_args) > JOB_ARGUMENT_COUNT else None
    try:
        data_source = _open_data_source(data_path)
    except OSError as exc:
        logger.error("Cannot open job data file %s: %s", data_path, exc)
        return int(BackendStatus.FAILED)

    try:
        deps = SupervisorDependenciesFactory.create(
            grace_seconds=settings.grace_seconds,
            data_source=data_source,
            forward_command=settings.forward_command,
        )
        loop = SupervisorLoop(
            policy,
            launcher=deps.launcher,
            check_runner=deps.check_runner,
            terminator=deps.terminator,
            resolver=deps.resolver,
        )
        return loop.run()
    finally:
        if data_source is not None:
            data_source.close()


__all__ = ["discovery_line", "main", "scheme_from_program", "usage"]
