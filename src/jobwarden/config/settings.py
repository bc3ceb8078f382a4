"""Runtime settings gathered from the environment at startup."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .errors import ConfigurationError
from .runtime import env_bool, env_seconds, env_str

DEVICE_URI_ENV = "DEVICE_URI"
SERVERBIN_ENV = "CUPS_SERVERBIN"
FORWARD_COMMAND_ENV = "JOBWARDEN_FORWARD_COMMAND"
GRACE_SECONDS_ENV = "JOBWARDEN_GRACE_SECONDS"
LOG_DIR_ENV = "JOBWARDEN_LOG_DIR"
DEBUG_ENV = "JOBWARDEN_DEBUG"

DEFAULT_SERVERBIN = "/usr/lib/cups"
DEFAULT_GRACE_SECONDS = 1.0


@dataclass(frozen=True)
class RuntimeSettings:
    """Environment-derived knobs that are not part of the device locator."""

    device_uri: str
    backend_dir: Path
    forward_command: Optional[Tuple[str, ...]]
    grace_seconds: float
    log_dir: Optional[Path]
    debug: bool

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        device_uri = env_str(DEVICE_URI_ENV, required=True)
        serverbin = env_str(SERVERBIN_ENV, or_value=DEFAULT_SERVERBIN)
        raw_forward = env_str(FORWARD_COMMAND_ENV)
        log_dir = env_str(LOG_DIR_ENV)
        return cls(
            device_uri=device_uri,
            backend_dir=Path(serverbin) / "backend",
            forward_command=_split_forward_command(raw_forward),
            grace_seconds=env_seconds(GRACE_SECONDS_ENV, or_value=DEFAULT_GRACE_SECONDS),
            log_dir=Path(log_dir).expanduser() if log_dir else None,
            debug=bool(env_bool(DEBUG_ENV, or_value=False)),
        )


def _split_forward_command(raw: Optional[str]) -> Optional[Tuple[str, ...]]:
    if raw is None:
        return None
    try:
        parts = tuple(shlex.split(raw))
    except ValueError as exc:
        raise ConfigurationError.invalid_value(FORWARD_COMMAND_ENV, raw, str(exc)) from exc
    if not parts:
        raise ConfigurationError.missing_value(FORWARD_COMMAND_ENV)
    return parts


__all__ = [
    "DEBUG_ENV",
    "DEFAULT_GRACE_SECONDS",
    "DEVICE_URI_ENV",
    "FORWARD_COMMAND_ENV",
    "GRACE_SECONDS_ENV",
    "LOG_DIR_ENV",
    "RuntimeSettings",
    "SERVERBIN_ENV",
]
