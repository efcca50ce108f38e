"""
Layered configuration manager: defaults, YAML files and environment variables
"""
import os
import yaml
import json
from typing import Dict, Any, Optional, List, Union, Callable, Tuple
from pathlib import Path
import logging
from dataclasses import dataclass, field
from enum import Enum
import copy
import hashlib
from datetime import datetime

logger = logging.getLogger(__name__)


class ConfigSource(Enum):
    """Configuration source enumeration"""
    FILE = "file"
    ENVIRONMENT = "environment"
    DEFAULT = "default"


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails"""
    pass


@dataclass
class ConfigSection:
    """Configuration section with metadata"""
    name: str
    data: Dict[str, Any]
    source: ConfigSource = ConfigSource.FILE
    timestamp: datetime = field(default_factory=datetime.now)
    description: str = ""
    required: bool = True


DEFAULT_STRUCTURE = {
    "app": {
        "name": "easyranch",
        "version": "1.0.0",
        "description": "EasyRanch herd monitoring dashboard",
        "debug": False,
        "log_level": "INFO"
    },
    "generator": {
        "population_size": 50,
        "day_window": 7,
        "pregnancy_rate": 0.65,
        "alert_coverage": 0.3,
        "alert_resolved_rate": 0.4,
        "realtime_count": 20,
        "seed": None
    },
    "dashboard": {
        "host": "0.0.0.0",
        "port": 5000,
        "debug": False,
        "attention_limit": 5
    },
    "logging": {
        "json_format": False,
        "file_enabled": False,
        "log_dir": "logs",
        "separate_error_log": False
    },
    "export": {
        "output_dir": "./outputs/exports",
        "formats": ["csv", "json"]
    }
}

# Environment variable -> (section, key, converter)
ENV_MAPPINGS: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "APP_DEBUG": ("app", "debug", lambda v: v.lower() in ("true", "1", "yes", "y")),
    "LOG_LEVEL": ("app", "log_level", str),
    "EASYRANCH_SEED": ("generator", "seed", int),
    "EASYRANCH_POPULATION_SIZE": ("generator", "population_size", int),
    "EASYRANCH_DAY_WINDOW": ("generator", "day_window", int),
    "EASYRANCH_PREGNANCY_RATE": ("generator", "pregnancy_rate", float),
    "DASHBOARD_HOST": ("dashboard", "host", str),
    "DASHBOARD_PORT": ("dashboard", "port", int),
}


class ConfigManager:
    """
    Configuration manager merging, lowest to highest precedence: built-in
    defaults, settings.yaml, settings.<env>.yaml and environment variables.
    """

    def __init__(self, config_dir: str = "config", env: str = None):
        self.config_dir = Path(config_dir)
        self.env = env or os.getenv("APP_ENV", "development")
        self.configs: Dict[str, ConfigSection] = {}
        self.config_hash: Dict[str, str] = {}
        self.watchers: List[Tuple[str, Callable]] = []
        self.config: Dict[str, Any] = copy.deepcopy(DEFAULT_STRUCTURE)

        logger.info(f"ConfigManager initialized for environment: {self.env}")

    def load_all(self, validate: bool = True) -> None:
        """Load all configuration layers"""
        logger.info(f"Loading configurations from {self.config_dir}")
        self.configs.pop("base", None)
        self.configs.pop("environment", None)
        self.configs.pop("environment_variables", None)

        base_config = self._load_config_file("settings.yaml")
        if base_config:
            self.configs["base"] = ConfigSection(
                name="base",
                data=base_config,
                source=ConfigSource.FILE,
                description="Base application configuration"
            )

        env_config_file = f"settings.{self.env}.yaml"
        env_config = self._load_config_file(env_config_file, required=False)
        if env_config:
            self.configs["environment"] = ConfigSection(
                name="environment",
                data=env_config,
                source=ConfigSource.FILE,
                description=f"{self.env} environment configuration",
                required=False
            )

        env_vars_config = self._load_environment_variables()
        if env_vars_config:
            self.configs["environment_variables"] = ConfigSection(
                name="environment_variables",
                data=env_vars_config,
                source=ConfigSource.ENVIRONMENT,
                description="Environment variables configuration"
            )

        self._merge_configurations()

        if validate:
            self.validate()

        logger.info(f"Loaded {len(self.configs)} configuration sections")

    def _load_config_file(self, filename: str, required: bool = True) -> Optional[Dict]:
        """Load configuration from YAML file"""
        filepath = self.config_dir / filename

        if not filepath.exists():
            if required:
                logger.warning(f"Configuration file not found: {filepath}")
            return None

        try:
            with open(filepath, 'r') as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            if required:
                raise ConfigValidationError(f"Failed to load config file {filename}: {str(e)}")
            logger.warning(f"Failed to load optional config file {filename}: {str(e)}")
            return None

        if not isinstance(config, dict):
            raise ConfigValidationError(f"Config file {filename} must contain a mapping")

        self.config_hash[filename] = self._calculate_file_hash(filepath)
        logger.debug(f"Loaded configuration from {filename}")
        return config

    def _load_environment_variables(self) -> Dict:
        """Load configuration from environment variables"""
        env_config: Dict[str, Dict[str, Any]] = {}

        for env_var, (section, key, convert) in ENV_MAPPINGS.items():
            if env_var not in os.environ:
                continue
            raw = os.environ[env_var]
            try:
                value = convert(raw)
            except ValueError:
                logger.warning(f"Invalid value for {env_var}: {raw}")
                continue
            env_config.setdefault(section, {})[key] = value

        return env_config

    def _calculate_file_hash(self, filepath: Path) -> str:
        """Calculate MD5 hash of a file"""
        file_hash = hashlib.md5()
        with open(filepath, 'rb') as f:
            for chunk in iter(lambda: f.read(8192), b''):
                file_hash.update(chunk)
        return file_hash.hexdigest()

    def _merge_configurations(self) -> None:
        """Merge all configuration sections into a single config"""
        merged = copy.deepcopy(DEFAULT_STRUCTURE)

        merge_order = ["base", "environment", "environment_variables", "runtime"]

        for section_name in merge_order:
            if section_name in self.configs:
                self._deep_merge(merged, self.configs[section_name].data)

        self.config = merged
        logger.debug("Merged all configurations")

    def _deep_merge(self, base: Dict, update: Dict) -> None:
        """Deep merge two dictionaries"""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = copy.deepcopy(value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation

        Examples:
            config.get("generator.population_size")
            config.get("dashboard.port", 5000)
        """
        value = self.config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any, section: str = "runtime") -> None:
        """
        Set configuration value at runtime

        Args:
            key: Dot notation key (e.g., "generator.seed")
            value: Value to set
            section: Configuration section to store in
        """
        if section not in self.configs:
            self.configs[section] = ConfigSection(
                name=section,
                data={},
                source=ConfigSource.DEFAULT,
                description="Runtime configuration",
                required=False
            )

        keys = key.split('.')
        data = self.configs[section].data

        for k in keys[:-1]:
            data = data.setdefault(k, {})

        data[keys[-1]] = value

        self._merge_configurations()
        self._notify_watchers(key, value)

        logger.debug(f"Set configuration: {key} = {value}")

    def get_section(self, section_name: str) -> Optional[ConfigSection]:
        """Get a configuration section by name"""
        return self.configs.get(section_name)

    def list_sections(self) -> List[str]:
        """List all configuration section names"""
        return list(self.configs.keys())

    def validate(self) -> bool:
        """Validate the merged configuration"""
        logger.info("Validating configuration...")

        errors = []

        for section_name, section in self.configs.items():
            if section.required and not section.data:
                errors.append(f"Required section '{section_name}' is empty")

        generator = self.get("generator") or {}
        for key in ("population_size", "day_window", "realtime_count"):
            value = generator.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(f"generator.{key} must be a non-negative integer, got {value!r}")

        for key in ("pregnancy_rate", "alert_coverage", "alert_resolved_rate"):
            value = generator.get(key)
            if not isinstance(value, (int, float)) or not 0 <= value <= 1:
                errors.append(f"generator.{key} must be between 0 and 1, got {value!r}")

        seed = generator.get("seed")
        if seed is not None and (not isinstance(seed, int) or seed < 0):
            errors.append(f"generator.seed must be a non-negative integer, got {seed!r}")

        port = self.get("dashboard.port")
        if not isinstance(port, int) or port < 1 or port > 65535:
            errors.append(f"Invalid dashboard port: {port}")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            logger.error(error_msg)
            raise ConfigValidationError(error_msg)

        logger.info("Configuration validation passed")
        return True

    def watch(self, key: str, callback: Callable[[str, Any], None]) -> None:
        """Watch for configuration changes"""
        self.watchers.append((key, callback))
        logger.debug(f"Added watcher for key: {key}")

    def _notify_watchers(self, key: str, value: Any) -> None:
        for watch_key, callback in self.watchers:
            if watch_key == key or (watch_key.endswith('*') and key.startswith(watch_key[:-1])):
                callback(key, value)

    def check_for_updates(self) -> bool:
        """Reload when any loaded configuration file changed on disk"""
        updated = False

        for filename, old_hash in list(self.config_hash.items()):
            filepath = self.config_dir / filename
            if filepath.exists():
                new_hash = self._calculate_file_hash(filepath)
                if new_hash != old_hash:
                    logger.info(f"Configuration file changed: {filename}")
                    updated = True

        if updated:
            self.load_all(validate=False)
            logger.info("Configuration reloaded due to file changes")

        return updated

    def export(self, format: str = "dict") -> Union[Dict, str]:
        """Export configuration in specified format"""
        if format == "dict":
            return copy.deepcopy(self.config)
        elif format == "json":
            return json.dumps(self.config, indent=2, default=str)
        elif format == "yaml":
            return yaml.dump(self.config, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported format: {format}")

    def save_to_file(self, filepath: Union[str, Path], format: str = "yaml") -> None:
        """Save current configuration to file"""
        filepath = Path(filepath)
        with open(filepath, 'w') as f:
            f.write(self.export("json" if format.lower() == "json" else "yaml"))
        logger.info(f"Configuration saved to {filepath}")


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: str = "config", env: str = None) -> ConfigManager:
    """Get or create the global configuration manager"""
    global _config_manager

    if _config_manager is None:
        _config_manager = ConfigManager(config_dir, env)
        _config_manager.load_all()

    return _config_manager


def reset_config_manager() -> None:
    """Reset the global configuration manager (for testing)"""
    global _config_manager
    _config_manager = None
