"""
Test suite for configuration loading.

Covers ConfigManager and the YAML threshold loading used by the
resolution engine.
"""

import logging
from pathlib import Path

import pytest
import yaml

from additive_lens.matching.resolution_engine import (
    DEFAULT_CONFIG_PATH,
    ResolutionEngine,
    _load_thresholds,
)
from additive_lens.matching.types import MatcherConfig
from additive_lens.utils.config_manager import ConfigManager


def _write_yaml(path: Path, data) -> Path:
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f)
    return path


# ============================================================================
# CONFIG MANAGER
# ============================================================================

class TestConfigManager:

    def test_defaults_without_file(self, tmp_path):
        manager = ConfigManager(tmp_path / "missing.yaml")
        assert manager.get_all_config() == ConfigManager.DEFAULT_CONFIG
        assert manager.get_threshold('match_threshold') == 0.244

    def test_no_path(self):
        manager = ConfigManager()
        assert manager.get_scoring_param('exact_bonus') == 0.5

    def test_partial_file_merged_with_defaults(self, tmp_path):
        path = _write_yaml(tmp_path / "config.yaml", {'thresholds': {'match_threshold': 0.3}})
        manager = ConfigManager(path)
        assert manager.get_threshold('match_threshold') == 0.3
        assert manager.get_threshold('high_confidence') == 0.7
        assert manager.get_regulation_param('fuzzy_min_length') == 4
        assert manager.get_matching_param('partial_color_matching') is True

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding='utf-8')
        assert ConfigManager(path).get_all_config() == ConfigManager.DEFAULT_CONFIG

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("thresholds: [unclosed", encoding='utf-8')
        with pytest.raises(yaml.YAMLError):
            ConfigManager(path)

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load_config(tmp_path / "missing.yaml")

    def test_unknown_parameter(self):
        with pytest.raises(KeyError):
            ConfigManager().get_threshold('review_threshold')

    def test_update_threshold(self):
        manager = ConfigManager()
        manager.update_threshold('match_threshold', 0.3)
        assert manager.get_threshold('match_threshold') == 0.3

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_update_threshold_out_of_range(self, value):
        manager = ConfigManager()
        with pytest.raises(ValueError):
            manager.update_threshold('match_threshold', value)
        assert manager.get_threshold('match_threshold') == 0.244

    def test_bulk_update_is_all_or_nothing(self):
        manager = ConfigManager()
        with pytest.raises(ValueError):
            manager.update_thresholds_bulk({'match_threshold': 0.3, 'high_confidence': 2.0})
        assert manager.get_threshold('match_threshold') == 0.244

        manager.update_thresholds_bulk({'match_threshold': 0.3, 'high_confidence': 0.8})
        assert manager.get_threshold('high_confidence') == 0.8

    def test_get_all_config_is_a_copy(self):
        manager = ConfigManager()
        snapshot = manager.get_all_config()
        snapshot['thresholds']['match_threshold'] = 0.9
        assert manager.get_threshold('match_threshold') == 0.244

    def test_reset_to_defaults(self):
        manager = ConfigManager()
        manager.update_threshold('match_threshold', 0.5)
        manager.reset_to_defaults()
        assert manager.get_threshold('match_threshold') == 0.244

    def test_save_and_reload(self, tmp_path):
        manager = ConfigManager()
        manager.update_threshold('match_threshold', 0.3)
        path = tmp_path / "nested" / "config.yaml"
        manager.save_config(path)
        assert ConfigManager(path).get_threshold('match_threshold') == 0.3

    def test_save_without_path(self):
        with pytest.raises(ValueError):
            ConfigManager().save_config()

    def test_matcher_config(self, tmp_path):
        path = _write_yaml(tmp_path / "config.yaml", {
            'thresholds': {'match_threshold': 0.3},
            'scoring': {'partial_bonus': 0.25},
            'matching': {'partial_color_matching': False, 'max_workers': 4},
        })
        config = ConfigManager(path).matcher_config()
        assert config == MatcherConfig(match_threshold=0.3, partial_bonus=0.25,
                                       partial_color_matching=False, max_workers=4)

    def test_defaults_match_matcher_config(self):
        assert ConfigManager().matcher_config() == MatcherConfig()


class TestValidateConfig:

    def test_defaults_valid(self):
        assert ConfigManager().validate_config() == []

    @pytest.mark.parametrize("section,name,value", [
        ('thresholds', 'match_threshold', 1.2),
        ('thresholds', 'match_threshold', 'high'),
        ('thresholds', 'match_threshold', True),
        ('scoring', 'exact_bonus', -0.5),
        ('scoring', 'min_overlap_words', 0),
        ('scoring', 'min_overlap_words', 1.5),
        ('regulation', 'fuzzy_min_length', 0),
        ('regulation', 'fuzzy_length_ratio', 0.0),
        ('regulation', 'fuzzy_length_ratio', 1.1),
        ('matching', 'max_workers', 0),
    ])
    def test_invalid_values(self, section, name, value):
        manager = ConfigManager()
        manager.config[section][name] = value
        errors = manager.validate_config()
        assert len(errors) == 1
        assert name in errors[0]

    def test_band_ordering(self):
        manager = ConfigManager()
        manager.config['thresholds']['medium_confidence'] = 0.8
        assert manager.validate_config() == ["medium_confidence must not exceed high_confidence"]


# ============================================================================
# ENGINE THRESHOLD LOADING
# ============================================================================

class TestLoadThresholds:

    def test_repository_config(self):
        assert DEFAULT_CONFIG_PATH.exists()
        assert _load_thresholds() == MatcherConfig()

    def test_missing_file(self, tmp_path):
        assert _load_thresholds(tmp_path / "missing.yaml") == MatcherConfig()

    def test_partial_file(self, tmp_path):
        path = _write_yaml(tmp_path / "config.yaml", {'thresholds': {'match_threshold': 0.4}})
        config = _load_thresholds(path)
        assert config.match_threshold == 0.4
        assert config.exact_bonus == 0.5

    def test_broken_yaml_falls_back(self, tmp_path, caplog):
        path = tmp_path / "broken.yaml"
        path.write_text("thresholds: [unclosed", encoding='utf-8')
        with caplog.at_level(logging.WARNING, logger="additive_lens.matching.resolution_engine"):
            assert _load_thresholds(path) == MatcherConfig()
        assert "Using defaults" in caplog.text

    def test_wrong_shape_falls_back(self, tmp_path):
        path = _write_yaml(tmp_path / "config.yaml", {'thresholds': {'match_threshold': 'loose'}})
        assert _load_thresholds(path) == MatcherConfig()

    def test_override_precedence(self, tmp_path, empty_catalog):
        path = _write_yaml(tmp_path / "config.yaml", {
            'thresholds': {'match_threshold': 0.4},
            'matching': {'max_workers': 2},
        })
        from_yaml = ResolutionEngine(empty_catalog, config_path=path)
        assert from_yaml.match_threshold == 0.4
        assert from_yaml.config.max_workers == 2

        overridden = ResolutionEngine(empty_catalog, config_path=path, match_threshold=0.6, max_workers=1)
        assert overridden.match_threshold == 0.6
        assert overridden.config.max_workers == 1

    def test_explicit_config_skips_yaml(self, tmp_path, empty_catalog):
        path = _write_yaml(tmp_path / "config.yaml", {'thresholds': {'match_threshold': 0.4}})
        engine = ResolutionEngine(empty_catalog, config=MatcherConfig(match_threshold=0.3),
                                  config_path=path)
        assert engine.match_threshold == 0.3
