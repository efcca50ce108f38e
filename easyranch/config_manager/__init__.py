"""
Configuration management module for layered settings
"""

from .manager import (
    ConfigManager,
    ConfigSection,
    ConfigSource,
    ConfigValidationError,
    get_config_manager,
    reset_config_manager
)

__all__ = [
    'ConfigManager',
    'ConfigSection',
    'ConfigSource',
    'ConfigValidationError',
    'get_config_manager',
    'reset_config_manager'
]
