"""Unit tests for elasticsim logging configuration."""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from unittest import mock

import elasticsim
from elasticsim.core.clock import Clock
from elasticsim.core.temporal import Instant
from elasticsim.logging_config import (
    LOGGER_NAME,
    JsonFormatter,
    _get_level,
    _get_logger,
    bind_clock,
)


class TestSilentByDefault:
    """Tests that the library is silent by default."""

    def test_import_produces_no_log_output(self, capfd):
        import importlib

        importlib.reload(elasticsim)

        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_logger_has_null_handler(self):
        logger = logging.getLogger(LOGGER_NAME)
        null_handlers = [h for h in logger.handlers if isinstance(h, logging.NullHandler)]
        assert len(null_handlers) >= 1

    def test_simulation_run_is_silent(self, capfd):
        elasticsim.run_simulation(elasticsim.SimulationConfig(job_rate=2, initial_capacity=4, horizon=5.0))
        captured = capfd.readouterr()
        assert captured.err == ""


class TestEnableConsoleLogging:
    def test_sets_level(self):
        elasticsim.enable_console_logging(level="DEBUG")
        assert _get_logger().level == logging.DEBUG

    def test_outputs_to_stderr(self, capfd):
        elasticsim.enable_console_logging(level="INFO")

        logging.getLogger(f"{LOGGER_NAME}.test").info("test message")

        captured = capfd.readouterr()
        assert "test message" in captured.err
        assert "[t=-]" in captured.err

    def test_stamps_simulation_time(self, capfd):
        elasticsim.enable_console_logging(level="INFO", format="%(sim_time)s %(message)s")
        bind_clock(Clock(Instant.from_seconds(12.5)))
        try:
            logging.getLogger(f"{LOGGER_NAME}.test").info("tick")
        finally:
            bind_clock(None)

        assert "12.500000 tick" in capfd.readouterr().err

    def test_run_logs_scale_actions(self, capfd):
        elasticsim.enable_console_logging(level="INFO")
        elasticsim.run_simulation(
            elasticsim.SimulationConfig(job_rate=10, initial_capacity=1, horizon=3.0)
        )
        err = capfd.readouterr().err
        assert "Scale out" in err
        assert "Simulation finished" in err

    def test_debug_run_logs_each_event(self, capfd):
        elasticsim.enable_console_logging(level="DEBUG")
        elasticsim.run_simulation(
            elasticsim.SimulationConfig(job_rate=2, initial_capacity=4, horizon=2.0)
        )
        err = capfd.readouterr().err
        assert "Processing {'time': 0.5, 'kind': 'ARRIVAL', 'job_id': 0}" in err
        assert "'kind': 'COMPLETION', 'box_id': 0, 'job_id': 0" in err
        assert "'kind': 'SCALE_TICK'" in err


class TestEnableFileLogging:
    def test_writes_to_rotating_file(self, tmp_path):
        log_file = tmp_path / "nested" / "run.log"
        handler = elasticsim.enable_file_logging(log_file, level="INFO", max_bytes=1024, backup_count=3)

        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 1024
        assert handler.backupCount == 3

        logging.getLogger(f"{LOGGER_NAME}.test").info("file test message")
        handler.flush()
        assert "file test message" in log_file.read_text()

    def test_json_file(self, tmp_path):
        log_file = tmp_path / "run.json"
        handler = elasticsim.enable_file_logging(log_file, level="INFO", json_format=True)

        logging.getLogger(f"{LOGGER_NAME}.test").info("json file test")
        handler.flush()

        data = json.loads(log_file.read_text().strip())
        assert data["message"] == "json file test"


class TestJsonLogging:
    def test_outputs_valid_json(self, capfd):
        elasticsim.enable_json_logging(level="INFO")

        logging.getLogger(f"{LOGGER_NAME}.test").info("json test")

        data = json.loads(capfd.readouterr().err.strip())
        assert data["message"] == "json test"
        assert data["level"] == "INFO"
        assert data["sim_time"] == "-"
        assert "timestamp" in data

    def test_includes_exception(self):
        formatter = JsonFormatter()
        try:
            raise ValueError("test error")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, sys.exc_info())
        data = json.loads(formatter.format(record))
        assert "ValueError" in data["exception"]


class TestConfigureFromEnv:
    def test_no_env_does_nothing(self):
        with mock.patch.dict("os.environ", {}, clear=True):
            elasticsim.configure_from_env()
        assert all(isinstance(h, logging.NullHandler) for h in _get_logger().handlers)

    def test_level_from_env(self):
        with mock.patch.dict("os.environ", {"ES_LOGGING": "warning"}, clear=True):
            elasticsim.configure_from_env()
        assert _get_logger().level == logging.WARNING

    def test_file_from_env(self, tmp_path):
        log_file = tmp_path / "env.log"
        with mock.patch.dict("os.environ", {"ES_LOG_FILE": str(log_file)}, clear=True):
            elasticsim.configure_from_env()
        assert any(isinstance(h, RotatingFileHandler) for h in _get_logger().handlers)
        assert _get_logger().level == logging.INFO


class TestLevels:
    def test_get_level(self):
        assert _get_level("debug") == logging.DEBUG
        assert _get_level(logging.ERROR) == logging.ERROR
        assert _get_level("nonsense") == logging.INFO

    def test_set_module_level(self):
        elasticsim.set_module_level("components.auto_scaler", "DEBUG")
        assert logging.getLogger("elasticsim.components.auto_scaler").level == logging.DEBUG
        logging.getLogger("elasticsim.components.auto_scaler").setLevel(logging.NOTSET)

    def test_disable_logging(self, capfd):
        elasticsim.enable_console_logging(level="INFO")
        elasticsim.disable_logging()
        logging.getLogger(f"{LOGGER_NAME}.test").error("should not appear")
        assert capfd.readouterr().err == ""
