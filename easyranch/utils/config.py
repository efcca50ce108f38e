import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

from easyranch.data_collection import constants


@dataclass
class GeneratorSettings:
    population_size: int = constants.DEFAULT_POPULATION_SIZE
    day_window: int = constants.DEFAULT_DAY_WINDOW
    pregnancy_rate: float = constants.DEFAULT_PREGNANCY_RATE
    alert_coverage: float = constants.DEFAULT_ALERT_COVERAGE
    alert_resolved_rate: float = constants.DEFAULT_ALERT_RESOLVED_RATE
    realtime_count: int = constants.DEFAULT_REALTIME_COUNT
    seed: Optional[int] = None

    def __post_init__(self):
        if self.population_size < 0:
            raise ValueError(f"population_size must be non-negative, got {self.population_size}")
        if self.day_window < 0:
            raise ValueError(f"day_window must be non-negative, got {self.day_window}")
        if self.realtime_count < 0:
            raise ValueError(f"realtime_count must be non-negative, got {self.realtime_count}")
        for name in ('pregnancy_rate', 'alert_coverage', 'alert_resolved_rate'):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")


@dataclass
class DashboardSettings:
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    attention_limit: int = constants.DEFAULT_ATTENTION_LIMIT


def _pick(cls, raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only the keys a settings dataclass understands"""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (raw or {}).items() if k in names}


class Config:
    """Typed view over the merged configuration dictionary"""

    def __init__(self, raw_config: Optional[Dict[str, Any]] = None):
        self.raw_config = raw_config or {}
        self.generator = GeneratorSettings(**_pick(GeneratorSettings, self.raw_config.get('generator')))
        self.dashboard = DashboardSettings(**_pick(DashboardSettings, self.raw_config.get('dashboard')))
        self.logging = dict(self.raw_config.get('logging') or {})
        self.export = dict(self.raw_config.get('export') or {})
        self.log_level = (self.raw_config.get('app') or {}).get('log_level', 'INFO')

    @classmethod
    def from_dict(cls, raw_config: Dict[str, Any]) -> 'Config':
        return cls(raw_config)

    @classmethod
    def from_manager(cls, manager) -> 'Config':
        """Build from a loaded ConfigManager"""
        return cls(manager.export("dict"))


def load_config(config_path: str = None) -> Config:
    """Load a single YAML settings file without environment layering"""
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(__file__),
            '../../config/settings.yaml'
        )

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    return Config(raw_config)
