"""
Structured logger with optional JSON output, file rotation and context
"""
import json
import logging
import logging.handlers
import os
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

# Context attached to every record logged in the current execution scope
log_context_var: ContextVar[Dict[str, Any]] = ContextVar('log_context', default={})

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
OWNED_HANDLER_FLAG = '_easyranch_owned'


class LogLevel(Enum):
    """Log level enumeration"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        context = log_context_var.get()
        if context:
            log_data['context'] = context

        extra = getattr(record, 'extra', None)
        if extra:
            log_data['extra'] = extra

        return json.dumps(log_data, default=str)


class StructuredLogger:
    """
    Logger wrapper adding context, keyword fields and timing to stdlib logging.

    Records from module loggers under the same name (e.g. easyranch.scoring)
    propagate to the handlers configured here.
    """

    def __init__(self, name: str = "easyranch", config: Optional[Dict] = None):
        self.name = name
        self.config = config or {}
        self.logger = logging.getLogger(name)
        self.logger.setLevel(self.config.get('level', 'INFO'))
        self.logger.propagate = False

        self._setup_handlers()

        self._log_count = 0
        self._error_count = 0

    def _formatter(self) -> logging.Formatter:
        if self.config.get('json_format', False):
            return JSONFormatter()
        return logging.Formatter(TEXT_FORMAT)

    def _setup_handlers(self) -> None:
        """Set up logging handlers based on configuration"""
        # Replace handlers installed by any earlier logger of the same name
        for handler in [h for h in self.logger.handlers if getattr(h, OWNED_HANDLER_FLAG, False)]:
            handler.close()
            self.logger.removeHandler(handler)
        self._handlers: List[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(self._formatter())
        self._add_handler(console_handler)

        log_dir = Path(self.config.get('log_dir', 'logs'))
        max_bytes = self.config.get('max_file_size', 10 * 1024 * 1024)
        backup_count = self.config.get('backup_count', 5)

        if self.config.get('file_enabled', False):
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_dir / f"{self.name}.log",
                maxBytes=max_bytes,
                backupCount=backup_count
            )
            file_handler.setFormatter(self._formatter())
            self._add_handler(file_handler)

        if self.config.get('separate_error_log', False):
            log_dir.mkdir(parents=True, exist_ok=True)
            error_handler = logging.handlers.RotatingFileHandler(
                filename=log_dir / f"{self.name}.error.log",
                maxBytes=max_bytes,
                backupCount=backup_count
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(self._formatter())
            self._add_handler(error_handler)

    def _add_handler(self, handler: logging.Handler) -> None:
        setattr(handler, OWNED_HANDLER_FLAG, True)
        self._handlers.append(handler)
        self.logger.addHandler(handler)

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: Optional[BaseException] = None, **kwargs) -> None:
        """Log error message with optional exception"""
        self._error_count += 1
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        self._error_count += 1
        self._log(logging.CRITICAL, message, **kwargs)

    def _log(self, level: int, message: str, exc_info: Optional[BaseException] = None,
             **kwargs) -> None:
        self._log_count += 1
        self.logger.log(level, message, exc_info=exc_info, extra={'extra': kwargs},
                        stacklevel=3)

    def with_context(self, **context_kwargs) -> 'LogContextManager':
        """
        Context manager for adding temporary context to logs

        Usage:
            with logger.with_context(cow_id='COW001'):
                logger.info("Scoring cow")
        """
        return LogContextManager(context_kwargs)

    def set_context(self, **context_kwargs) -> None:
        """Set context for current execution scope"""
        current = log_context_var.get().copy()
        current.update(context_kwargs)
        log_context_var.set(current)

    def clear_context(self) -> None:
        log_context_var.set({})

    def get_context(self) -> Dict[str, Any]:
        return log_context_var.get().copy()

    def timer(self, operation: str) -> 'TimerContext':
        """
        Context manager for timing operations

        Usage:
            with logger.timer("generate_snapshot"):
                generator.generate()
        """
        return TimerContext(self, operation)

    def get_stats(self) -> Dict[str, Any]:
        return {
            'total_logs': self._log_count,
            'errors': self._error_count,
            'handlers': len(self._handlers)
        }

    def flush(self) -> None:
        for handler in self._handlers:
            handler.flush()


class LogContextManager:
    """Context manager for log context"""

    def __init__(self, context: Dict[str, Any]):
        self.context = context
        self._token = None

    def __enter__(self):
        new_context = log_context_var.get().copy()
        new_context.update(self.context)
        self._token = log_context_var.set(new_context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        log_context_var.reset(self._token)


class TimerContext:
    """Context manager for timing operations"""

    def __init__(self, logger: StructuredLogger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time = None
        self.duration_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting operation: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is None:
            self.logger.info(
                f"Completed operation: {self.operation}",
                operation=self.operation,
                duration_ms=self.duration_ms,
                status="success"
            )
        else:
            self.logger.error(
                f"Failed operation: {self.operation}",
                operation=self.operation,
                duration_ms=self.duration_ms,
                status="failed",
                error_type=exc_type.__name__,
                error_message=str(exc_val)
            )


def setup_logging(
    level: Union[str, LogLevel] = "INFO",
    json_format: bool = False,
    file_enabled: bool = False,
    log_dir: str = "logs",
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    separate_error_log: bool = False,
    name: str = "easyranch"
) -> StructuredLogger:
    """
    Set up and configure structured logging

    Returns:
        Configured StructuredLogger instance, also installed as the global one
    """
    global _structured_logger

    config = {
        'level': level.value if isinstance(level, LogLevel) else level,
        'json_format': json_format,
        'file_enabled': file_enabled,
        'log_dir': log_dir,
        'max_file_size': max_file_size,
        'backup_count': backup_count,
        'separate_error_log': separate_error_log,
    }

    _structured_logger = StructuredLogger(name, config)
    return _structured_logger


# Global logger instance
_structured_logger: Optional[StructuredLogger] = None


def _env_flag(name: str) -> bool:
    return os.getenv(name, 'false').lower() == 'true'


def get_structured_logger(config: Optional[Dict] = None) -> StructuredLogger:
    """
    Get or create the global structured logger

    Args:
        config: Optional configuration dictionary; read from environment
            variables when omitted
    """
    global _structured_logger

    if _structured_logger is None:
        if config is None:
            config = {
                'level': os.getenv('LOG_LEVEL', 'INFO'),
                'json_format': _env_flag('LOG_JSON_FORMAT'),
                'file_enabled': _env_flag('LOG_FILE_ENABLED'),
                'log_dir': os.getenv('LOG_DIR', 'logs'),
                'separate_error_log': _env_flag('LOG_SEPARATE_ERROR'),
            }
        _structured_logger = StructuredLogger(config=config)

    return _structured_logger


def reset_structured_logger() -> None:
    """Reset the global structured logger (for testing)"""
    global _structured_logger
    _structured_logger = None
