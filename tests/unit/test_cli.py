"""
Unit tests for the avena-loadgen command line entry point.
"""

import json

import pytest

from avena_loadgen import cli
from avena_loadgen.config import load_settings
from avena_loadgen.engine import RunOutcome, RunResult, WorkerBackend, WorkerReport, WorkerStatus
from avena_loadgen.errors import AggregateRunFailure
from avena_loadgen.profile import FixedLoad, RangeLoad, TimeOfDayRangeLoad
from avena_loadgen.util.logger import LoggerPolicyPeriod

SMALL_HOST = ["--backend", "thread", "--cores", "1", "--threads-per-core", "2"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv("LOADGEN_CONFIG", raising=False)
    monkeypatch.delenv("LOADGEN_LOG_FILE", raising=False)
    # ścieżki względne rozwiązywane w katalogu tymczasowym
    monkeypatch.chdir(tmp_path)


class TestResolveSettings:
    def test_defaults(self):
        args = cli.build_parser().parse_args([])

        settings = cli.resolve_settings(args)

        assert settings.to_profile() == RangeLoad(0.3, 0.5)
        assert settings.duration == 0
        assert settings.backend is WorkerBackend.PROCESS

    def test_flags_override_config_file(self, tmp_path):
        path = tmp_path / "loadgen.ini"
        path.write_text("[LOADGEN]\nmin_cpu_load_percentage = 0.1\nduration = 30\n")
        args = cli.build_parser().parse_args(
            ["--config", str(path), "--duration", "5", "--backend", "thread"]
        )

        settings = cli.resolve_settings(args)

        assert settings.min_cpu_load_percentage == 0.1
        assert settings.duration == 5
        assert settings.backend is WorkerBackend.THREAD

    def test_config_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "loadgen.json"
        path.write_text(json.dumps({"cpuLoadPercentage": 0.9}))
        monkeypatch.setenv("LOADGEN_CONFIG", str(path))

        settings = cli.resolve_settings(cli.build_parser().parse_args([]))

        assert settings.to_profile() == FixedLoad(0.9)

    def test_quiet_hours(self):
        args = cli.build_parser().parse_args(
            ["--quiet-hours", "22", "6", "--quiet-min", "0.1", "--quiet-max", "0.2"]
        )

        profile = cli.resolve_settings(args).to_profile()

        assert isinstance(profile, TimeOfDayRangeLoad)
        assert profile.quiet == RangeLoad(0.1, 0.2)
        assert (profile.quiet_start_hour, profile.quiet_end_hour) == (22, 6)

    def test_arch_override(self):
        args = cli.build_parser().parse_args(["--cores", "3", "--threads-per-core", "1"])

        arch_info = cli.resolve_arch_info(args)

        assert arch_info.logical_cpus == 3


class TestMain:
    def test_bounded_run_exits_ok(self, capsys):
        code = cli.main(["--duration", "1", "--load", "0.5"] + SMALL_HOST)

        assert code == cli.EXIT_OK
        assert "Done generating CPU load!" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "argv",
        [
            ["--min", "0.6", "--max", "0.4"],
            ["--load", "1.5"],
            ["--alternating", "--segments", "4"],
            ["--duration", "-1"],
            ["--config", "missing.ini"],
        ],
    )
    def test_invalid_configuration(self, argv):
        assert cli.main(argv + SMALL_HOST) == cli.EXIT_INVALID_CONFIG

    def test_interrupted_worker_exits_with_failure(self, monkeypatch):
        class InterruptedEngine:
            def __init__(self, backend, message_logger=None):
                pass

            def run(self, request):
                report = WorkerReport(
                    index=0, name="worker-0", status=WorkerStatus.INTERRUPTED
                )
                result = RunResult(outcome=RunOutcome.COMPLETED, reports=[report])
                raise AggregateRunFailure([report], result)

        monkeypatch.setattr(cli, "LoadEngine", InterruptedEngine)

        assert cli.main(["--duration", "1"] + SMALL_HOST) == cli.EXIT_RUN_FAILURE

    def test_save_config(self, tmp_path):
        path = tmp_path / "saved.ini"

        code = cli.main(
            ["--duration", "1", "--min", "0.2", "--max", "0.3", "--save-config", str(path)]
            + SMALL_HOST
        )

        assert code == cli.EXIT_OK
        saved = load_settings(path)
        assert saved.to_profile() == RangeLoad(0.2, 0.3)
        assert saved.duration == 1

    def test_log_file(self, tmp_path):
        path = tmp_path / "logs" / "loadgen.log"

        code = cli.main(["--duration", "1", "--log-file", str(path)] + SMALL_HOST)

        assert code == cli.EXIT_OK
        assert "Done generating CPU load!" in path.read_text()

    @pytest.fixture
    def logger_kwargs(self, monkeypatch):
        created = {}

        class RecordingLogger:
            def __init__(self, filename, **kwargs):
                created.update(kwargs, filename=filename, closed=False)

            def info(self, message):
                pass

            debug = warning = error = info

            def close(self):
                created["closed"] = True

        monkeypatch.setattr(cli, "MessageLogger", RecordingLogger)
        return created

    def test_log_rotation_and_core_forwarded(self, tmp_path, logger_kwargs):
        code = cli.main(
            ["--duration", "1", "--log-file", str(tmp_path / "x.log"),
             "--log-period", "60", "--log-core", "0"]
            + SMALL_HOST
        )

        assert code == cli.EXIT_OK
        assert logger_kwargs["period"] == 60
        assert logger_kwargs["core"] == 0
        assert logger_kwargs["closed"] is True

    def test_log_period_defaults_to_no_rotation(self, tmp_path, logger_kwargs):
        cli.main(["--duration", "1", "--log-file", str(tmp_path / "x.log")] + SMALL_HOST)

        assert logger_kwargs["period"] == LoggerPolicyPeriod.NONE
        assert logger_kwargs["core"] is None
