"""
Configuration management for the matching system.

Handles loading, updating, and persisting configuration including
decision thresholds, scoring bonuses, and regulation lookup guards.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from additive_lens.matching.types import MatcherConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages system configuration including thresholds and scoring parameters.

    Provides methods to load, update, and persist configuration, and to
    build the MatcherConfig used by the resolution engine.
    """

    DEFAULT_CONFIG = {
        'thresholds': {
            'match_threshold': 0.244,
            'high_confidence': 0.7,
            'medium_confidence': 0.5,
        },
        'scoring': {
            'exact_bonus': 0.5,
            'partial_bonus': 0.3,
            'word_overlap_ratio': 0.7,
            'min_overlap_words': 2,
        },
        'regulation': {
            'fuzzy_length_ratio': 0.6,
            'fuzzy_min_length': 4,
        },
        'matching': {
            'partial_color_matching': True,
            'max_workers': 1,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = config_path
        self.config: dict[str, Any] = {}

        if config_path and config_path.exists():
            self.load_config(config_path)
        else:
            logger.info("No config file found, using defaults")
            self.config = copy.deepcopy(self.DEFAULT_CONFIG)

    def load_config(self, path: Path) -> dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Loaded configuration dictionary

        Raises:
            FileNotFoundError: If config file does not exist
            yaml.YAMLError: If config file is invalid
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise

        if not loaded_config:
            logger.warning(f"Empty config file at {path}, using defaults")
            self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        else:
            # Merge with defaults to ensure all keys exist
            self.config = self._merge_with_defaults(loaded_config)

        self.config_path = path
        logger.info(f"Loaded configuration from {path}")
        return self.config

    def get_threshold(self, name: str) -> float:
        """
        Get a threshold value by name.

        Args:
            name: Threshold name (e.g., 'match_threshold', 'high_confidence')

        Returns:
            Threshold value

        Raises:
            KeyError: If threshold name not found
        """
        return float(self._get('thresholds', name))

    def get_scoring_param(self, name: str) -> Any:
        return self._get('scoring', name)

    def get_regulation_param(self, name: str) -> Any:
        return self._get('regulation', name)

    def get_matching_param(self, name: str) -> Any:
        return self._get('matching', name)

    def update_threshold(self, name: str, value: float) -> None:
        """
        Update a threshold value.

        Args:
            name: Threshold name
            value: New threshold value (0-1)

        Raises:
            ValueError: If value is out of range
        """
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Threshold value must be between 0 and 1, got {value}")

        thresholds = self.config.setdefault('thresholds', {})
        old_value = thresholds.get(name)
        thresholds[name] = value

        logger.info(f"Updated threshold '{name}': {old_value} -> {value}")

    def update_thresholds_bulk(self, thresholds: dict[str, float]) -> None:
        """
        Update multiple thresholds at once.

        Nothing is changed if any value is out of range.

        Args:
            thresholds: Dictionary of threshold name -> value pairs

        Raises:
            ValueError: If any value is out of range
        """
        for name, value in thresholds.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Threshold '{name}' value must be between 0 and 1, got {value}")

        current = self.config.setdefault('thresholds', {})
        for name, value in thresholds.items():
            old_value = current.get(name)
            current[name] = value
            logger.debug(f"Updated threshold '{name}': {old_value} -> {value}")

        logger.info(f"Bulk updated {len(thresholds)} thresholds")

    def matcher_config(self) -> MatcherConfig:
        """Build the engine's MatcherConfig from the current values."""
        return MatcherConfig.from_sections(
            self.config.get('thresholds') or {},
            self.config.get('scoring') or {},
            self.config.get('matching') or {},
        )

    def save_config(self, path: Optional[Path] = None) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to save to (uses self.config_path if not provided)

        Raises:
            ValueError: If no path provided and no config_path set
        """
        save_path = path or self.config_path

        if not save_path:
            raise ValueError("No path provided and no config_path set")

        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(save_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(
                    self.config,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    indent=2
                )
        except OSError as e:
            logger.error(f"Failed to save configuration: {e}")
            raise

        logger.info(f"Saved configuration to {save_path}")

    def get_all_config(self) -> dict[str, Any]:
        """Get a copy of the complete configuration dictionary."""
        return copy.deepcopy(self.config)

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        logger.info("Configuration reset to defaults")

    def validate_config(self) -> list[str]:
        """
        Validate the current configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        thresholds = self.config.get('thresholds', {})
        for name, value in thresholds.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                errors.append(f"Threshold '{name}' must be numeric, got {type(value)}")
            elif not 0.0 <= value <= 1.0:
                errors.append(f"Threshold '{name}' must be between 0 and 1, got {value}")

        high = thresholds.get('high_confidence')
        medium = thresholds.get('medium_confidence')
        if isinstance(high, (int, float)) and isinstance(medium, (int, float)) and medium > high:
            errors.append("medium_confidence must not exceed high_confidence")

        scoring = self.config.get('scoring', {})
        for name in ('exact_bonus', 'partial_bonus'):
            value = scoring.get(name)
            if value is not None and (not isinstance(value, (int, float)) or value < 0):
                errors.append(f"{name} must be a non-negative number")
        if 'min_overlap_words' in scoring:
            if not isinstance(scoring['min_overlap_words'], int) or scoring['min_overlap_words'] < 1:
                errors.append("min_overlap_words must be a positive integer")

        regulation = self.config.get('regulation', {})
        if 'fuzzy_min_length' in regulation:
            if not isinstance(regulation['fuzzy_min_length'], int) or regulation['fuzzy_min_length'] < 1:
                errors.append("fuzzy_min_length must be a positive integer")
        ratio = regulation.get('fuzzy_length_ratio')
        if ratio is not None and (not isinstance(ratio, (int, float)) or not 0.0 < ratio <= 1.0):
            errors.append("fuzzy_length_ratio must be in (0, 1]")

        matching = self.config.get('matching', {})
        if 'max_workers' in matching:
            if not isinstance(matching['max_workers'], int) or matching['max_workers'] < 1:
                errors.append("max_workers must be a positive integer")

        return errors

    def _get(self, section: str, name: str) -> Any:
        if name not in self.config.get(section, {}):
            raise KeyError(f"Parameter '{name}' not found in '{section}' configuration")
        return self.config[section][name]

    def _merge_with_defaults(self, loaded_config: dict) -> dict:
        """Merge loaded config with defaults to ensure all keys exist."""
        merged = copy.deepcopy(self.DEFAULT_CONFIG)

        for section, values in loaded_config.items():
            if section in merged and isinstance(values, dict):
                merged[section].update(values)
            else:
                merged[section] = values

        return merged
