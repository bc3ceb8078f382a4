"""Parse the device locator that configures a supervisor invocation.

Locator layout::

    scheme:/exitCodePolicy/maxAttempts/delaySeconds/checkCommand/targetLocator

The check command is percent-encoded (``%20`` for space, ``%2F`` for slash).
The target locator is everything after the fifth separator and is passed
through verbatim, so it may contain further slashes (``socket://host:9100``).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence
from urllib.parse import unquote

from .config.errors import ConfigurationError
from .config.settings import DEVICE_URI_ENV
from .policy import ExitCodePolicy, MonitorPolicy, TargetCommand

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_FIELD_NAMES = ("exit code policy", "maximum attempts", "delay seconds", "check command", "target locator")


@dataclass(frozen=True)
class LocatorFields:
    """Raw components of a locator, check command already decoded."""

    scheme: str
    exit_code_policy: str
    max_attempts: str
    delay_seconds: str
    check_command: str
    target_locator: str


def _strip_separator(rest: str) -> str:
    if rest.startswith("//"):
        return rest[2:]
    if rest.startswith("/"):
        return rest[1:]
    return rest


def parse_locator(locator: str) -> LocatorFields:
    """Split *locator* into its components; any missing component is fatal."""
    scheme, sep, rest = locator.partition(":")
    if not sep or not _SCHEME_PATTERN.match(scheme):
        raise ConfigurationError.locator_field_missing("a scheme", locator)

    parts = _strip_separator(rest).split("/", len(_FIELD_NAMES) - 1)
    parts += [""] * (len(_FIELD_NAMES) - len(parts))
    for name, value in zip(_FIELD_NAMES, parts):
        if not value.strip():
            raise ConfigurationError.locator_field_missing(f"the {name}", locator)

    policy_raw, attempts_raw, delay_raw, check_raw, target = parts
    return LocatorFields(
        scheme=scheme,
        exit_code_policy=policy_raw,
        max_attempts=attempts_raw,
        delay_seconds=delay_raw,
        check_command=unquote(check_raw),
        target_locator=target,
    )


def parse_max_attempts(raw: str) -> int:
    value = raw.strip()
    if not (value.isascii() and value.isdigit()):
        raise ConfigurationError.invalid_value("maximum attempts", raw, "Expected a non-negative integer")
    return int(value)


def parse_delay_seconds(raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise ConfigurationError.invalid_value("delay seconds", raw, "Expected a non-negative number") from exc
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise ConfigurationError.invalid_value("delay seconds", raw, "Expected a non-negative number")
    return value


def target_scheme(target_locator: str) -> str:
    scheme, sep, _ = target_locator.partition(":")
    if not sep or not _SCHEME_PATTERN.match(scheme):
        raise ConfigurationError.invalid_value("target locator", target_locator, "It must start with a backend scheme")
    return scheme


def build_target_command(
    target_locator: str,
    job_args: Sequence[str],
    *,
    backend_dir: Path,
    base_env: Mapping[str, str],
) -> TargetCommand:
    """Describe the target backend: run directly, locator in its environment."""
    executable = backend_dir / target_scheme(target_locator)
    env = dict(base_env)
    env[DEVICE_URI_ENV] = target_locator
    return TargetCommand(
        executable=executable,
        argv=(target_locator, *job_args),
        env=env,
        locator=target_locator,
    )


def build_policy(
    fields: LocatorFields,
    job_args: Sequence[str],
    *,
    backend_dir: Path,
    base_env: Mapping[str, str],
) -> MonitorPolicy:
    return MonitorPolicy(
        exit_code_policy=ExitCodePolicy.parse(fields.exit_code_policy),
        max_attempts=parse_max_attempts(fields.max_attempts),
        delay_seconds=parse_delay_seconds(fields.delay_seconds),
        check_command=fields.check_command,
        target_command=build_target_command(
            fields.target_locator,
            job_args,
            backend_dir=backend_dir,
            base_env=base_env,
        ),
    )


__all__ = [
    "LocatorFields",
    "build_policy",
    "build_target_command",
    "parse_delay_seconds",
    "parse_locator",
    "parse_max_attempts",
    "target_scheme",
]
