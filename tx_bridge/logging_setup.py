"""
TxBridge - Logging System
===========================
Structured JSON logging for the translation layer.

Features:
- JSON structured logs (file, with rotation)
- Colored console output
- Per-category loggers under the "txbridge" namespace
- Context enrichment via extra_data
- Performance tracking
"""

import logging
import logging.handlers
import json
import sys
import time
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone
import traceback


ROOT_LOGGER_NAME = "txbridge"


# ============================================================================
# JSON FORMATTER
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    Formatter emitting one JSON object per record.

    Output structure:
    {
        "timestamp": "2025-11-26T22:00:00.000000Z",
        "level": "WARNING",
        "logger": "txbridge.domain.script",
        "message": "Unknown script type",
        "extra_data": {...},
        "exception": {...}
    }
    """

    def __init__(
        self,
        include_extra: bool = True,
        include_stack: bool = True
    ):
        super().__init__()
        self.include_extra = include_extra
        self.include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": _utc_iso(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.thread:
            log_data["thread_id"] = record.thread
            log_data["thread_name"] = record.threadName

        if self.include_extra and hasattr(record, 'extra_data'):
            log_data["extra_data"] = record.extra_data

        if record.exc_info and self.include_stack:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_data, default=str)


# ============================================================================
# TEXT FORMATTER (Human-Readable)
# ============================================================================

class ColoredTextFormatter(logging.Formatter):
    """
    Colored formatter for console output.

    Colors:
    - DEBUG: Gray
    - INFO: Green
    - WARNING: Yellow
    - ERROR: Red
    - CRITICAL: Bold Red
    """

    COLORS = {
        'DEBUG': '\033[90m',
        'INFO': '\033[92m',
        'WARNING': '\033[93m',
        'ERROR': '\033[91m',
        'CRITICAL': '\033[1;91m',
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"

        timestamp = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).strftime('%Y-%m-%d %H:%M:%S')

        message = f"{timestamp} [{levelname}] {record.name}: {record.getMessage()}"

        if hasattr(record, 'extra_data'):
            message += f" | {record.extra_data}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def _utc_iso(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).strftime(
        '%Y-%m-%dT%H:%M:%S.%fZ'
    )


# ============================================================================
# LOGGER CLASS
# ============================================================================

class TxBridgeLogger:
    """
    Logger wrapper with structured context.

    Example:
        >>> logger = get_logger("codec")
        >>> logger.set_context(network="regtest")
        >>> logger.debug("Decoded transaction", extra_data={"size": 223})
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self._context: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def set_context(self, **kwargs):
        """Set context added to every record"""
        self._context.update(kwargs)

    def clear_context(self):
        self._context.clear()

    def _log(
        self,
        level: int,
        message: str,
        extra_data: Optional[Dict[str, Any]] = None,
        exc_info=None
    ):
        merged_extra = {**self._context}
        if extra_data:
            merged_extra.update(extra_data)

        self._logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={'extra_data': merged_extra} if merged_extra else {}
        )

    def debug(self, message: str, extra_data: Optional[Dict] = None):
        self._log(logging.DEBUG, message, extra_data)

    def info(self, message: str, extra_data: Optional[Dict] = None):
        self._log(logging.INFO, message, extra_data)

    def warning(self, message: str, extra_data: Optional[Dict] = None):
        self._log(logging.WARNING, message, extra_data)

    def error(self, message: str, extra_data: Optional[Dict] = None, exc_info=None):
        self._log(logging.ERROR, message, extra_data, exc_info)

    def exception(self, message: str, extra_data: Optional[Dict] = None):
        """Log ERROR with the current traceback"""
        self._log(logging.ERROR, message, extra_data, exc_info=sys.exc_info())


# ============================================================================
# SETUP FUNCTION
# ============================================================================

def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_dir: Path = Path("./logs"),
    log_format: str = "json",
    log_rotation_mb: int = 10,
    log_backup_count: int = 5,
    enable_console: bool = True,
) -> TxBridgeLogger:
    """
    Configure the "txbridge" logger hierarchy.

    Library code only ever calls get_logger(); setup_logging() is for
    applications (and the bundled CLI) that want handlers installed.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR, CRITICAL
        log_to_file: Write a rotating log file under log_dir
        log_dir: Directory for log files
        log_format: "json" or "text" (file handler only)
        log_rotation_mb: Size before rotation
        log_backup_count: Rotated files to keep
        enable_console: Also log to stderr with colors

    Returns:
        TxBridgeLogger: Root logger wrapper
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    if log_to_file:
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "txbridge.log",
            maxBytes=log_rotation_mb * 1024 * 1024,
            backupCount=log_backup_count,
            encoding='utf-8'
        )

        if log_format == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
                )
            )

        root_logger.addHandler(file_handler)

    if enable_console:
        # stderr keeps CLI stdout clean for piping
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ColoredTextFormatter())
        root_logger.addHandler(console_handler)

    return TxBridgeLogger(root_logger)


def get_logger(category: str) -> TxBridgeLogger:
    """
    Get the logger for a category.

    Args:
        category: Category (codec, domain.script, cli, ...)

    Returns:
        TxBridgeLogger: Logger named "txbridge.<category>"
    """
    return TxBridgeLogger(logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}"))


# ============================================================================
# PERFORMANCE TRACKING
# ============================================================================

class PerformanceLogger:
    """
    Context manager logging the duration of an operation.

    Example:
        >>> logger = get_logger("cli")
        >>> with PerformanceLogger(logger, "decode"):
        ...     Transaction.from_hex(raw)
    """

    def __init__(
        self,
        logger: TxBridgeLogger,
        operation: str,
        threshold_ms: Optional[int] = None
    ):
        self.logger = logger
        self.operation = operation
        self.threshold_ms = threshold_ms
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        extra = {
            "operation": self.operation,
            "duration_ms": round(elapsed_ms, 2)
        }

        if self.threshold_ms and elapsed_ms > self.threshold_ms:
            self.logger.warning(
                f"{self.operation} took {elapsed_ms:.2f}ms (threshold: {self.threshold_ms}ms)",
                extra_data=extra
            )
        else:
            self.logger.debug(
                f"{self.operation} completed in {elapsed_ms:.2f}ms",
                extra_data=extra
            )


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "setup_logging",
    "get_logger",
    "TxBridgeLogger",
    "PerformanceLogger",
    "JSONFormatter",
    "ColoredTextFormatter",
]
