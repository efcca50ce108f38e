"""
Data validation module for record range checks and snapshot consistency
"""

from .validator import (
    RecordValidator,
    ValidationReport,
    ValidationRule,
    ValidationSeverity,
    get_data_validator,
    reset_data_validator,
    validate_alert_data,
    validate_cow_data,
    validate_snapshot
)

__all__ = [
    'RecordValidator',
    'ValidationReport',
    'ValidationRule',
    'ValidationSeverity',
    'get_data_validator',
    'reset_data_validator',
    'validate_alert_data',
    'validate_cow_data',
    'validate_snapshot'
]
