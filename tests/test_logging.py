"""
Tests for the structured logging system
"""
import json
import logging
import sys

import pytest

from easyranch.custom_logging.structured_logger import (
    OWNED_HANDLER_FLAG, JSONFormatter, LogLevel, StructuredLogger, get_structured_logger,
    log_context_var, reset_structured_logger, setup_logging
)


def read_json_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestJSONFormatter:
    def test_format_basic(self):
        """Test JSON formatter with basic log record"""
        formatter = JSONFormatter()
        record = logging.LogRecord(
            name="easyranch.test",
            level=logging.INFO,
            pathname="test.py",
            lineno=10,
            msg="Snapshot ready",
            args=(),
            exc_info=None
        )

        data = json.loads(formatter.format(record))

        assert data['level'] == 'INFO'
        assert data['message'] == 'Snapshot ready'
        assert data['logger'] == 'easyranch.test'
        assert data['timestamp'].endswith('Z')
        assert 'extra' not in data

    def test_format_with_exception(self):
        formatter = JSONFormatter()

        try:
            raise ValueError("Bad seed")
        except ValueError:
            record = logging.LogRecord(
                name="easyranch.test",
                level=logging.ERROR,
                pathname="test.py",
                lineno=10,
                msg="Generation failed",
                args=(),
                exc_info=sys.exc_info()
            )

        data = json.loads(formatter.format(record))

        assert data['exception']['type'] == 'ValueError'
        assert data['exception']['message'] == 'Bad seed'
        assert 'Traceback' in data['exception']['traceback']


class TestStructuredLogger:
    @pytest.fixture(autouse=True)
    def _logger(self, tmp_path, request):
        self.log_dir = tmp_path
        self.name = f"easyranch_test_{request.node.name}"
        self.logger = StructuredLogger(self.name, {
            'level': 'DEBUG',
            'json_format': True,
            'file_enabled': True,
            'separate_error_log': True,
            'log_dir': str(tmp_path),
        })
        yield
        for handler in list(self.logger.logger.handlers):
            handler.close()
        self.logger.logger.handlers.clear()
        log_context_var.set({})

    def _records(self):
        self.logger.flush()
        return read_json_lines(self.log_dir / f"{self.name}.log")

    def test_keyword_fields_in_extra(self):
        self.logger.info("Snapshot refreshed", cows=50, seed=7)

        record = self._records()[-1]
        assert record['message'] == "Snapshot refreshed"
        assert record['extra'] == {'cows': 50, 'seed': 7}

    def test_context_manager(self):
        with self.logger.with_context(cow_id="COW001"):
            self.logger.info("Scoring cow")
        self.logger.info("Outside context")

        records = self._records()
        assert records[-2]['context'] == {'cow_id': "COW001"}
        assert 'context' not in records[-1]

    def test_set_and_clear_context(self):
        self.logger.set_context(request_id="abc")
        assert self.logger.get_context() == {'request_id': "abc"}
        self.logger.clear_context()
        assert self.logger.get_context() == {}

    def test_timer_success(self):
        with self.logger.timer("generate_snapshot") as timer:
            pass

        records = self._records()
        assert records[-2]['message'] == "Starting operation: generate_snapshot"
        assert records[-1]['extra']['status'] == "success"
        assert records[-1]['extra']['operation'] == "generate_snapshot"
        assert timer.duration_ms >= 0

    def test_timer_failure(self):
        with pytest.raises(RuntimeError):
            with self.logger.timer("export"):
                raise RuntimeError("disk full")

        record = self._records()[-1]
        assert record['level'] == 'ERROR'
        assert record['extra']['error_type'] == 'RuntimeError'
        assert record['extra']['error_message'] == 'disk full'

    def test_error_log_receives_only_errors(self):
        self.logger.info("All good")
        self.logger.warning("Slightly odd")
        self.logger.error("Broken", reason="test")
        self.logger.flush()

        errors = read_json_lines(self.log_dir / f"{self.name}.error.log")
        assert [r['message'] for r in errors] == ["Broken"]

    def test_caller_location(self):
        self.logger.info("Where am I")
        assert self._records()[-1]['function'] == 'test_caller_location'

    def test_level_filtering(self):
        self.logger.logger.setLevel(logging.WARNING)
        self.logger.info("Hidden")
        self.logger.warning("Shown")

        assert [r['message'] for r in self._records()] == ["Shown"]

    def test_stats(self):
        self.logger.info("one")
        self.logger.error("two")

        stats = self.logger.get_stats()
        assert stats['total_logs'] == 2
        assert stats['errors'] == 1
        assert stats['handlers'] == 3

    def test_stats_ignore_foreign_handlers(self):
        foreign = logging.NullHandler()
        self.logger.logger.addHandler(foreign)
        try:
            assert self.logger.get_stats()['handlers'] == 3
        finally:
            self.logger.logger.removeHandler(foreign)

    def test_recreating_logger_replaces_handlers(self):
        foreign = logging.NullHandler()
        self.logger.logger.addHandler(foreign)
        try:
            again = StructuredLogger(self.name, {'level': 'INFO', 'log_dir': str(self.log_dir)})

            assert again.get_stats()['handlers'] == 1
            assert foreign in again.logger.handlers
            owned = [h for h in again.logger.handlers if getattr(h, OWNED_HANDLER_FLAG, False)]
            assert owned == again._handlers
        finally:
            self.logger.logger.removeHandler(foreign)


class TestGlobalLogger:
    def teardown_method(self):
        reset_structured_logger()

    def test_setup_logging_installs_global(self):
        logger = setup_logging(level=LogLevel.DEBUG)

        assert get_structured_logger() is logger
        assert logger.logger.level == logging.DEBUG

    def test_get_reads_environment(self, monkeypatch):
        reset_structured_logger()
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        logger = get_structured_logger()
        assert logger.logger.level == logging.WARNING
        assert get_structured_logger() is logger
