"""
Unit tests for avena_loadgen.util.logger.

This module tests:
- message formatting with and without colors
- console fallback of the module functions
- MessageLogger writing to a file from the receiver process
"""

import time

import psutil
import pytest

from avena_loadgen.util.logger import (
    LoggerPolicyPeriod,
    LogLevelType,
    LogReceiver,
    MessageLogger,
    debug,
    error,
    format_message,
    info,
    warning,
)


def _wait_for_content(path, expected, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists() and all(text in path.read_text() for text in expected):
            return True
        time.sleep(0.05)
    return False


class TestFormatMessage:
    def test_plain_format(self):
        text = format_message("hello", LogLevelType.warning, colorize=False)

        assert text.endswith("[warning] hello")

    def test_colorized_format_keeps_message(self):
        text = format_message("hello", LogLevelType.error)

        assert "hello" in text
        assert "error" in text

    @pytest.mark.parametrize(
        "func,level",
        [(debug, "debug"), (info, "info"), (warning, "warning"), (error, "error")],
    )
    def test_module_functions_print_without_logger(self, capsys, func, level):
        func("message text", colorize=False)

        assert f"[{level}] message text" in capsys.readouterr().out


class TestLogReceiver:
    def test_old_files_are_removed(self, tmp_path):
        receiver = LogReceiver(str(tmp_path / "run.log"), files_count=1, create_symlinks=False)
        receiver.files = [str(tmp_path / f"run_{i}.log") for i in range(4)]
        for name in receiver.files:
            open(name, "w").close()

        receiver._remove_old_files()

        assert len(receiver.files) == 2
        assert sorted(p.name for p in tmp_path.iterdir()) == ["run_2.log", "run_3.log"]


class TestMessageLogger:
    def test_writes_messages_to_file(self, tmp_path):
        path = tmp_path / "logs" / "loadgen.log"
        logger = MessageLogger(str(path), period=LoggerPolicyPeriod.NONE)
        try:
            logger.info("Done generating CPU load!")
            logger.error("worker-1 interrupted")
            assert _wait_for_content(
                path, ["[info] Done generating CPU load!", "[error] worker-1 interrupted"]
            )
        finally:
            logger.close()

        assert path.is_symlink()
        assert not logger.process.is_alive()

    def test_debug_can_be_disabled(self, tmp_path):
        path = tmp_path / "loadgen.log"
        logger = MessageLogger(str(path), debug=False)
        try:
            logger.debug("hidden")
            logger.set_debug(True)
            logger.debug("visible")
            assert _wait_for_content(path, ["visible"])
        finally:
            logger.close()

        assert "hidden" not in path.read_text()

    def test_module_functions_forward_to_logger(self, tmp_path):
        path = tmp_path / "loadgen.log"
        logger = MessageLogger(str(path))
        try:
            warning("forwarded", message_logger=logger)
            assert _wait_for_content(path, ["[warning] forwarded"])
        finally:
            logger.close()

    @pytest.mark.skipif(
        not hasattr(psutil.Process, "cpu_affinity"), reason="cpu_affinity niedostepne"
    )
    def test_writer_pinned_to_core(self, tmp_path):
        core = psutil.Process().cpu_affinity()[0]
        logger = MessageLogger(str(tmp_path / "loadgen.log"), core=core)
        try:
            assert psutil.Process(logger.process.pid).cpu_affinity() == [core]
        finally:
            logger.close()

    def test_send_after_close_falls_back_to_console(self, tmp_path, capsys):
        logger = MessageLogger(str(tmp_path / "loadgen.log"))
        logger.close()

        logger.info("after close")

        assert "after close" in capsys.readouterr().out
