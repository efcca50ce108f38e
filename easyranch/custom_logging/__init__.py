"""
Structured logging with JSON output, rotation and context
"""

from .structured_logger import (
    StructuredLogger,
    JSONFormatter,
    get_structured_logger,
    reset_structured_logger,
    setup_logging,
    LogLevel,
    log_context_var
)

__all__ = [
    'StructuredLogger',
    'JSONFormatter',
    'get_structured_logger',
    'reset_structured_logger',
    'setup_logging',
    'LogLevel',
    'log_context_var'
]
