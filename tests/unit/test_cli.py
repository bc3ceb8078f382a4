"""Tests for the backend-style command line."""

from __future__ import annotations

import stat
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from jobwarden import cli
from jobwarden.config.settings import DEVICE_URI_ENV, FORWARD_COMMAND_ENV, GRACE_SECONDS_ENV, SERVERBIN_ENV
from jobwarden.status_codes import BackendStatus

JOB_ARGS = ["42", "alice", "quarterly report", "1", "media=a4"]
LOCATOR = "watchdog:/inherit/3/10/lpstat%20-p/socket://printer:9100"


@pytest.fixture
def fake_loop(monkeypatch):
    loop_cls = MagicMock()
    loop_cls.return_value.run.return_value = int(BackendStatus.CANCEL)
    monkeypatch.setattr(cli, "SupervisorLoop", loop_cls)
    return loop_cls


class TestSchemeFromProgram:
    @pytest.mark.parametrize(
        ("program", "expected"),
        [
            ("/usr/lib/cups/backend/watchdog", "watchdog"),
            ("watchdog", "watchdog"),
            ("/src/jobwarden/__main__.py", "jobwarden"),
            ("-c", "jobwarden"),
            ("", "jobwarden"),
        ],
    )
    def test_scheme(self, program, expected):
        assert cli.scheme_from_program(program) == expected


class TestArguments:
    def test_no_arguments_prints_discovery_line(self, capsys, fake_loop):
        assert cli.main(["/usr/lib/cups/backend/watchdog"]) == BackendStatus.OK

        out = capsys.readouterr().out
        assert out == 'network watchdog "Unknown" "Job watchdog (supervised backend)"\n'
        fake_loop.assert_not_called()

    @pytest.mark.parametrize("count", [1, 4, 7])
    def test_wrong_argument_count_prints_usage(self, capsys, fake_loop, count):
        assert cli.main(["watchdog", *["x"] * count]) == BackendStatus.FAILED

        err = capsys.readouterr().err
        assert "Usage: watchdog job-id user title copies options [file]" in err
        fake_loop.assert_not_called()


class TestConfigurationErrors:
    def test_missing_device_uri_stops_queue(self, capsys, fake_loop):
        assert cli.main(["watchdog", *JOB_ARGS]) == BackendStatus.STOP

        assert "Configuration error" in capsys.readouterr().err
        fake_loop.assert_not_called()

    def test_missing_delay_stops_queue_without_launching(self, monkeypatch, capsys, fake_loop):
        factory = MagicMock()
        monkeypatch.setattr(cli, "SupervisorDependenciesFactory", factory)
        monkeypatch.setenv(DEVICE_URI_ENV, "watchdog:/inherit/3")

        assert cli.main(["watchdog", *JOB_ARGS]) == BackendStatus.STOP

        assert "does not define the delay seconds" in capsys.readouterr().err
        factory.create.assert_not_called()
        fake_loop.assert_not_called()

    def test_invalid_exit_policy_stops_queue(self, monkeypatch, fake_loop):
        monkeypatch.setenv(DEVICE_URI_ENV, "watchdog:/whenever/3/10/sleep/socket://printer")

        assert cli.main(["watchdog", *JOB_ARGS]) == BackendStatus.STOP
        fake_loop.assert_not_called()

    @pytest.mark.parametrize(
        "locator",
        [
            "watchdog:/inherit/²/1/sleep/socket://printer",
            "watchdog:/²/1/1/sleep/socket://printer",
        ],
    )
    def test_non_ascii_digits_stop_queue(self, monkeypatch, capsys, fake_loop, locator):
        monkeypatch.setenv(DEVICE_URI_ENV, locator)

        assert cli.main(["watchdog", *JOB_ARGS]) == BackendStatus.STOP

        assert "Configuration error" in capsys.readouterr().err
        fake_loop.assert_not_called()

    def test_unreadable_data_file_fails_job(self, monkeypatch, tmp_path, capsys, fake_loop):
        monkeypatch.setenv(DEVICE_URI_ENV, LOCATOR)

        result = cli.main(["watchdog", *JOB_ARGS, str(tmp_path / "missing.prn")])

        assert result == BackendStatus.FAILED
        assert "Cannot open job data file" in capsys.readouterr().err
        fake_loop.assert_not_called()


class TestSupervision:
    def test_runs_loop_with_parsed_policy(self, monkeypatch, fake_loop):
        monkeypatch.setenv(DEVICE_URI_ENV, LOCATOR)

        assert cli.main(["watchdog", *JOB_ARGS]) == BackendStatus.CANCEL

        policy = fake_loop.call_args.args[0]
        assert policy.max_attempts == 3
        assert policy.delay_seconds == 10
        assert policy.check_command == "lpstat -p"
        assert policy.target_command.argv == ("socket://printer:9100", *JOB_ARGS)
        assert policy.target_command.executable == Path("/usr/lib/cups/backend/socket")
        fake_loop.return_value.run.assert_called_once_with()

    def test_data_file_is_closed_after_run(self, monkeypatch, tmp_path, fake_loop):
        data_file = tmp_path / "job.prn"
        data_file.write_bytes(b"data")
        monkeypatch.setenv(DEVICE_URI_ENV, LOCATOR)
        factory = MagicMock(wraps=cli.SupervisorDependenciesFactory)
        monkeypatch.setattr(cli, "SupervisorDependenciesFactory", factory)

        cli.main(["watchdog", *JOB_ARGS, str(data_file)])

        source = factory.create.call_args.kwargs["data_source"]
        assert source.name == str(data_file)
        assert source.closed


def test_end_to_end_with_real_backend(monkeypatch, tmp_path):
    backend_dir = tmp_path / "serverbin" / "backend"
    backend_dir.mkdir(parents=True)
    backend = backend_dir / "fake"
    backend.write_text(
        "#!/bin/sh\n"
        '[ "$DEVICE_URI" = "fake://printer" ] || exit 9\n'
        '[ "$1" = "42" ] || exit 8\n'
        '[ "$(cat)" = "hello" ] || exit 7\n'
        "exit 3\n"
    )
    backend.chmod(backend.stat().st_mode | stat.S_IXUSR)
    data_file = tmp_path / "job.prn"
    data_file.write_bytes(b"hello")

    monkeypatch.setenv(DEVICE_URI_ENV, "watchdog:/inherit/0/0.2/sleep/fake://printer")
    monkeypatch.setenv(SERVERBIN_ENV, str(tmp_path / "serverbin"))
    monkeypatch.setenv(FORWARD_COMMAND_ENV, "cat")
    monkeypatch.setenv(GRACE_SECONDS_ENV, "0.1")

    assert cli.main(["watchdog", *JOB_ARGS, str(data_file)]) == 3
