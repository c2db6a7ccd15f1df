# spectroscope/utils/config.py - Configuration management
"""
Configuration management for the snapshot comparisons.
Loads and validates configuration from YAML files.
"""

import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging


class Config:
    """
    Configuration manager for spectroscope.

    Loads configuration from YAML files and provides access to settings.
    """

    DEFAULT_CONFIG = {
        'categories': {
            'smoothing': 1,
            'min_expected_count': 5,
            'significance': 0.05,
        },
        'edges': {
            'significance': 0.05,
            'smoothing_divisor': 1000,
            'min_effective_sample': 4,
            'epsilon': 0.0001,
            'alternative': 'greater',
            'workers': 1,
        },
        'output': {
            'format': 'text',
        },
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
        """
        self.logger = logging.getLogger(__name__)
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file:
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str):
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML file
        """
        config_path = Path(config_file)

        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_file}, using defaults")
            return

        try:
            with open(config_path, 'r') as f:
                loaded_config = yaml.safe_load(f) or {}

            self._merge_config(self.config, loaded_config)
            self.logger.info(f"Loaded configuration from {config_file}")

        except yaml.YAMLError as e:
            self.logger.error(f"Failed to load config {config_file}: {e}")
            raise

        self.validate()

    def _number(self, key: str) -> float:
        value = self.get(key)
        if isinstance(value, bool):
            raise ValueError(f"{key} must be a number, got {value!r}")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValueError(f"{key} must be a number, got {value!r}") from None

    def validate(self):
        """
        Check the comparison thresholds are usable.

        Raises:
            ValueError: If a threshold is not a number or is out of range
        """
        for key in ('categories.significance', 'edges.significance'):
            value = self._number(key)
            if not 0 < value < 1:
                raise ValueError(f"{key} must be between 0 and 1, got {value}")
            self.set(key, value)

        for key in ('edges.smoothing_divisor', 'edges.epsilon'):
            value = self._number(key)
            if not value > 0:
                raise ValueError(f"{key} must be positive, got {self.get(key)!r}")
            self.set(key, value)

        for key in ('categories.min_expected_count', 'edges.min_effective_sample'):
            self.set(key, self._number(key))

        # Smoothed counts are reported as whole numbers
        smoothing = self._number('categories.smoothing')
        if smoothing < 0 or not smoothing.is_integer():
            raise ValueError(f"categories.smoothing must be a non-negative integer, "
                             f"got {self.get('categories.smoothing')!r}")
        self.set('categories.smoothing', int(smoothing))

        if self.get('edges.alternative') not in ('greater', 'less', 'two-sided'):
            raise ValueError(f"edges.alternative must be greater, less or two-sided, "
                             f"got {self.get('edges.alternative')!r}")

        workers = self._number('edges.workers')
        if workers < 1 or not workers.is_integer():
            raise ValueError(f"edges.workers must be a positive integer, got {self.get('edges.workers')!r}")
        self.set('edges.workers', int(workers))

    def _merge_config(self, base: Dict, override: Dict):
        """
        Recursively merge configuration dictionaries.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary
        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key.

        Args:
            key: Configuration key (e.g., 'edges.significance')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set configuration value by dot-notation key.

        Args:
            key: Configuration key (e.g., 'edges.workers')
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def section(self, name: str) -> Dict:
        """Return a copy of one top-level section, e.g. 'edges'."""
        return copy.deepcopy(self.config.get(name, {}))

    def to_dict(self) -> Dict:
        """
        Get full configuration as dictionary.

        Returns:
            Configuration dictionary
        """
        return copy.deepcopy(self.config)

    def save_to_file(self, config_file: str):
        """
        Save current configuration to YAML file.

        Args:
            config_file: Path to output YAML file
        """
        config_path = Path(config_file)

        with open(config_path, 'w') as f:
            yaml.dump(self.config, f, default_flow_style=False)

        self.logger.info(f"Saved configuration to {config_file}")
