"""Typed, immutable description of what one supervisor invocation must do."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .config.errors import ConfigurationError
from .status_codes import lookup_status, status_name

SLEEP_SENTINEL = "sleep"
INHERIT_KEYWORD = "inherit"
MAX_EXIT_CODE = 255


@dataclass(frozen=True)
class ExitCodePolicy:
    """Either a fixed exit code, or inherit the target's (``fixed_code is None``)."""

    fixed_code: Optional[int] = None

    @property
    def inherit(self) -> bool:
        return self.fixed_code is None

    @classmethod
    def parse(cls, raw: str) -> "ExitCodePolicy":
        value = raw.strip()
        if value.lower() == INHERIT_KEYWORD:
            return cls(fixed_code=None)
        if value.isascii() and value.isdigit():
            code = int(value)
            if code > MAX_EXIT_CODE:
                raise ConfigurationError.invalid_value("exit code policy", raw, f"Exit codes range from 0 to {MAX_EXIT_CODE}")
            return cls(fixed_code=code)
        named = lookup_status(value)
        if named is None:
            raise ConfigurationError.unknown_exit_policy(raw)
        return cls(fixed_code=int(named))

    def describe(self) -> str:
        if self.inherit:
            return INHERIT_KEYWORD
        return f"fixed {status_name(self.fixed_code)}"


@dataclass(frozen=True)
class TargetCommand:
    """How to spawn the supervised target: no shell, explicit environment."""

    executable: Path
    argv: Tuple[str, ...]
    env: Mapping[str, str] = field(repr=False)
    locator: str

    def describe(self) -> str:
        return f"{self.executable} ({self.locator})"


@dataclass(frozen=True)
class MonitorPolicy:
    exit_code_policy: ExitCodePolicy
    max_attempts: int
    delay_seconds: float
    check_command: str
    target_command: TargetCommand

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ConfigurationError.invalid_value("maximum attempts", self.max_attempts, "Must be zero or positive")
        if self.delay_seconds < 0:
            raise ConfigurationError.invalid_value("delay seconds", self.delay_seconds, "Must be zero or positive")
        if not self.check_command:
            raise ConfigurationError.missing_value("check command")
        if not self.target_command.argv:
            raise ConfigurationError.missing_value("target command")

    @property
    def single_attempt(self) -> bool:
        return self.max_attempts == 1

    @property
    def unlimited_attempts(self) -> bool:
        return self.max_attempts == 0

    @property
    def check_is_sleep(self) -> bool:
        return self.check_command == SLEEP_SENTINEL

    def describe(self) -> str:
        attempts = "unlimited" if self.unlimited_attempts else str(self.max_attempts)
        return (
            f"exit policy {self.exit_code_policy.describe()}, attempts {attempts}, "
            f"delay {self.delay_seconds:g}s, check {self.check_command!r}"
        )


__all__ = [
    "ExitCodePolicy",
    "INHERIT_KEYWORD",
    "MonitorPolicy",
    "SLEEP_SENTINEL",
    "TargetCommand",
]
