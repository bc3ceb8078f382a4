"""Tests for the immutable supervision policy types."""

from __future__ import annotations

import dataclasses

import pytest

from jobwarden.config import ConfigurationError
from jobwarden.policy import ExitCodePolicy, MonitorPolicy, TargetCommand
from tests.helpers.supervisor_fakes import make_policy, make_target_command


class TestExitCodePolicy:
    @pytest.mark.parametrize("raw", ["inherit", "INHERIT", " Inherit "])
    def test_inherit(self, raw):
        policy = ExitCodePolicy.parse(raw)
        assert policy.inherit
        assert policy.fixed_code is None
        assert policy.describe() == "inherit"

    @pytest.mark.parametrize(("raw", "expected"), [("0", 0), ("5", 5), ("255", 255), ("cancel", 5), ("Retry", 6)])
    def test_fixed(self, raw, expected):
        policy = ExitCodePolicy.parse(raw)
        assert not policy.inherit
        assert policy.fixed_code == expected

    def test_numeric_out_of_range(self):
        with pytest.raises(ConfigurationError, match="0 to 255"):
            ExitCodePolicy.parse("256")

    @pytest.mark.parametrize("raw", ["sometimes", "-1", "1.5", "\u00b2"])
    def test_unknown(self, raw):
        with pytest.raises(ConfigurationError, match="Unknown exit code policy"):
            ExitCodePolicy.parse(raw)

    def test_describe_fixed_uses_status_name(self):
        assert ExitCodePolicy(fixed_code=3).describe() == "fixed HOLD"
        assert ExitCodePolicy(fixed_code=99).describe() == "fixed 99"


class TestMonitorPolicy:
    def test_modes(self):
        assert make_policy(max_attempts=1).single_attempt
        assert make_policy(max_attempts=0).unlimited_attempts
        assert not make_policy(max_attempts=3).single_attempt
        assert make_policy(check_command="sleep").check_is_sleep
        assert not make_policy(check_command="lpstat -p").check_is_sleep

    def test_is_immutable(self):
        policy = make_policy()
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.max_attempts = 9

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"max_attempts": -1}, "maximum attempts"),
            ({"delay_seconds": -0.5}, "delay seconds"),
            ({"check_command": ""}, "check command"),
        ],
    )
    def test_rejects_invalid_values(self, overrides, message):
        values = {
            "exit_code_policy": ExitCodePolicy(),
            "max_attempts": 3,
            "delay_seconds": 2,
            "check_command": "sleep",
            "target_command": make_target_command(),
        }
        values.update(overrides)
        with pytest.raises(ConfigurationError, match=message):
            MonitorPolicy(**values)

    def test_rejects_empty_target_argv(self):
        command = make_target_command()
        empty = TargetCommand(executable=command.executable, argv=(), env=command.env, locator=command.locator)
        with pytest.raises(ConfigurationError, match="target command"):
            MonitorPolicy(ExitCodePolicy(), 3, 2, "sleep", empty)

    def test_describe(self):
        policy = make_policy(exit_policy="cancel", max_attempts=0, delay_seconds=2.5, check_command="lpstat -p")
        assert policy.describe() == "exit policy fixed CANCEL, attempts unlimited, delay 2.5s, check 'lpstat -p'"

    def test_target_env_hidden_from_repr(self):
        assert "PATH" not in repr(make_target_command())
