"""
logging_config.py - structured logging

Features:
- JSON log format (for log shippers)
- performance tracking (elapsed time per operation)
- context logging (product / operation attached to every record)
- optional rotating file + error-only file

Nothing is configured at import time; call setup_logging().
"""

import sys
import json
import logging
import functools
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable, Union
from contextlib import contextmanager
from dataclasses import dataclass, asdict


DEFAULT_LOGGER_NAME = "wasser"


class JSONFormatter(logging.Formatter):
    """JSON log formatter"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "context"):
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """ANSI colored console formatter"""

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[41m",   # Red background
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = self.COLORS.get(original, "")
        record.levelname = f"{color}{original:8}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # other handlers see the plain level name
            record.levelname = original


@dataclass
class LogContext:
    """Log context"""
    request_id: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    collection: Optional[str] = None
    operation: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches a LogContext to every record"""

    def process(self, msg, kwargs):
        if "extra" not in kwargs:
            kwargs["extra"] = {}

        if hasattr(self.extra, "to_dict"):
            kwargs["extra"]["context"] = self.extra.to_dict()
        elif isinstance(self.extra, dict):
            kwargs["extra"]["context"] = self.extra

        return msg, kwargs


class PerformanceLogger:
    """Elapsed-time logger"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @contextmanager
    def track(self, operation: str, **context):
        """
        Track the duration of a block

        Usage:
            with perf_logger.track("cost", product="Tumba 600"):
                engine.calculate(product, datasets)
        """
        start_time = time.perf_counter()
        self.logger.debug(f"Start: {operation}", extra={"context": context})

        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start_time
            self.logger.error(
                f"Failed: {operation} ({elapsed:.3f}s) - {e}",
                extra={"context": {**context, "error": str(e), "duration_ms": elapsed * 1000}},
                exc_info=True
            )
            raise
        else:
            elapsed = time.perf_counter() - start_time
            self.logger.info(
                f"Done: {operation} ({elapsed:.3f}s)",
                extra={"context": {**context, "duration_ms": elapsed * 1000}}
            )

    def timed(self, operation: str = None):
        """
        Decorator form of track()

        Usage:
            @perf_logger.timed("import")
            def import_catalog():
                pass
        """
        def decorator(func: Callable):
            op_name = operation or func.__name__

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                with self.track(op_name):
                    return func(*args, **kwargs)

            return wrapper
        return decorator


def setup_logging(
    name: str = DEFAULT_LOGGER_NAME,
    level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    log_to_console: bool = True,
    json_format: bool = False,
    color_output: bool = True,
) -> logging.Logger:
    """
    Configure a logger

    Args:
        name: logger name
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_dir: directory for rotating log files (None = no file logging)
        log_to_console: attach a console handler
        json_format: JSON records instead of text
        color_output: ANSI colors on a TTY

    Returns:
        configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    logger.handlers.clear()

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)

        if json_format:
            console_handler.setFormatter(JSONFormatter())
        elif color_output and sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%H:%M:%S"
            ))
        else:
            console_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))

        logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f"{name}_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8"
        )

        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))

        logger.addHandler(file_handler)

        # errors only
        error_file = log_dir / f"{name}_errors.log"
        error_handler = RotatingFileHandler(
            error_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(lineno)d\n%(message)s\n",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(error_handler)

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """Logger under the package namespace (handlers come from setup_logging)"""
    if not name:
        return logging.getLogger(DEFAULT_LOGGER_NAME)
    if name == DEFAULT_LOGGER_NAME or name.startswith(DEFAULT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{DEFAULT_LOGGER_NAME}.{name}")


def get_context_logger(
    name: str = None,
    context: LogContext = None,
    **kwargs
) -> ContextAdapter:
    """Logger that attaches a LogContext"""
    logger = get_logger(name)
    ctx = context if context else LogContext(**kwargs)
    return ContextAdapter(logger, ctx)


def get_perf_logger(name: str = None) -> PerformanceLogger:
    """Performance tracking logger"""
    return PerformanceLogger(get_logger(name))
