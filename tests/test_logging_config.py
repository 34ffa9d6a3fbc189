"""logging_config.py / core/logging.py tests"""

import json
import logging
import sys
from pathlib import Path

import pytest
from rich.logging import RichHandler

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasser.core.logging import setup_logger
from wasser.logging_config import (
    JSONFormatter,
    ColoredFormatter,
    LogContext,
    ContextAdapter,
    PerformanceLogger,
    setup_logging,
    get_logger,
    get_context_logger,
    get_perf_logger,
)


def make_record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord("wasser.test", level, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    """JSONFormatter / ColoredFormatter"""

    def test_json_formatter(self):
        data = json.loads(JSONFormatter().format(make_record("Шкаф")))
        assert data["level"] == "INFO"
        assert data["logger"] == "wasser.test"
        assert data["message"] == "Шкаф"
        assert data["timestamp"].endswith("Z")

    def test_json_formatter_context(self):
        record = make_record(context={"product_id": "p1"})
        data = json.loads(JSONFormatter().format(record))
        assert data["context"] == {"product_id": "p1"}

    def test_colored_formatter_restores_level(self):
        record = make_record(level=logging.WARNING)
        text = ColoredFormatter("%(levelname)s %(message)s").format(record)
        assert "\033[33m" in text
        assert record.levelname == "WARNING"


class TestContext:
    """LogContext / ContextAdapter"""

    def test_context_to_dict_skips_none(self):
        ctx = LogContext(product_id="p1", operation="cost")
        assert ctx.to_dict() == {"product_id": "p1", "operation": "cost"}

    def test_adapter_attaches_context(self, caplog):
        caplog.set_level(logging.INFO, logger="wasser.ctx")
        adapter = get_context_logger("ctx", product_name="Шкаф", operation="cost")
        assert isinstance(adapter, ContextAdapter)
        adapter.info("calculated")
        record = caplog.records[-1]
        assert record.context == {"product_name": "Шкаф", "operation": "cost"}


class TestPerformanceLogger:
    """PerformanceLogger"""

    def test_track_success(self, caplog):
        caplog.set_level(logging.DEBUG, logger="wasser.perf")
        perf = get_perf_logger("perf")
        with perf.track("import", rows=3):
            pass
        done = [r for r in caplog.records if r.getMessage().startswith("Done: import")]
        assert len(done) == 1
        assert done[0].context["rows"] == 3
        assert "duration_ms" in done[0].context

    def test_track_reraises(self, caplog):
        caplog.set_level(logging.DEBUG, logger="wasser.perf")
        perf = PerformanceLogger(logging.getLogger("wasser.perf"))
        with pytest.raises(ValueError):
            with perf.track("cost"):
                raise ValueError("bad")
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_timed(self):
        perf = get_perf_logger("perf")

        @perf.timed("sum")
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"


class TestSetup:
    """setup_logging / setup_logger / get_logger"""

    def test_get_logger_namespace(self):
        assert get_logger().name == "wasser"
        assert get_logger("cli").name == "wasser.cli"
        assert get_logger("wasser.audit").name == "wasser.audit"

    def test_console_only_creates_no_files(self, tmp_path):
        logger = setup_logging("wasser.test.console", level="WARNING")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert list(tmp_path.iterdir()) == []

    def test_file_logging(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = setup_logging(
            "wasser.test.files", level="INFO", log_dir=log_dir, log_to_console=False
        )
        logger.error("disk full")
        for handler in logger.handlers:
            handler.flush()

        files = sorted(p.name for p in log_dir.iterdir())
        assert "wasser.test.files_errors.log" in files
        assert len(files) == 2
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_rich_logger(self):
        logger = setup_logger("wasser.test.rich", "debug")
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0], RichHandler)

        setup_logger("wasser.test.rich", logging.INFO)
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO

    def test_rich_logger_unknown_level(self):
        logger = setup_logger("wasser.test.rich2", "LOUD")
        assert logger.level == logging.INFO
