"""
Tests for config.py - BnferrisConfig.
"""

import os
import json
import pytest

from bnferris.config import BnferrisConfig, BnferrisConfigError, _ensure_bnferris_dir, default_config_path
from bnferris.grammar import GrammarGenerator, parse


class TestBnferrisConfig:
    """Tests for the BnferrisConfig class."""

    def test_config_init_defaults(self):
        """Test config initialization with default values."""
        config = BnferrisConfig()
        assert config.max_depth == 32
        assert config.max_repetition == 20
        assert config.max_expansions == 10000
        assert config.optional_probability == 0.5
        assert config.log_level == "WARNING"

    def test_config_init_custom_values(self):
        """Test config initialization with custom values."""
        config = BnferrisConfig(max_depth=8, max_repetition=3)
        assert config.max_depth == 8
        assert config.max_repetition == 3

    def test_config_get_method(self):
        """Test the get method with default fallback."""
        config = BnferrisConfig(max_depth=2)
        assert config.get("max_depth") == 2
        assert config.get("nonexistent_key") is None
        assert config.get("nonexistent_key", "default") == "default"

    def test_config_attribute_set(self):
        """Test setting config values via attributes."""
        config = BnferrisConfig()
        config.max_depth = 64
        assert config.max_depth == 64

    def test_config_invalid_attribute(self):
        """Test accessing non-existent attribute raises error."""
        config = BnferrisConfig()
        with pytest.raises(AttributeError):
            _ = config.nonexistent_attribute

    def test_defaults_match_generator(self):
        """Test that config defaults are the generator's own defaults."""
        generator = GrammarGenerator(parse('a = "x"'))
        config = BnferrisConfig()
        for key in config.generator_options():
            assert config.get(key) == getattr(generator, key)

    def test_generator_options(self):
        """Test that only generator keys are handed to the generator."""
        options = BnferrisConfig(max_depth=5).generator_options()
        assert options == {
            "max_depth": 5,
            "max_repetition": 20,
            "max_expansions": 10000,
            "optional_probability": 0.5,
        }


class TestConfigFiles:
    """Tests for loading and saving config files."""

    def test_missing_default_file_gives_defaults(self, isolated_home):
        assert not os.path.exists(default_config_path())
        config = BnferrisConfig.load()
        assert config.max_depth == 32
        # loading never creates files
        assert not (isolated_home / ".bnferris").exists()

    def test_load_explicit_file(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"max_depth": 4, "optional_probability": 0.25}))
        config = BnferrisConfig.load(str(path))
        assert config.max_depth == 4
        assert config.optional_probability == 0.25
        assert config.max_repetition == 20

    def test_load_default_file(self, isolated_home):
        bnferris_dir = isolated_home / ".bnferris"
        bnferris_dir.mkdir()
        (bnferris_dir / "config.json").write_text(json.dumps({"max_repetition": 9}))
        assert BnferrisConfig.load().max_repetition == 9

    def test_load_missing_explicit_file(self, tmp_path):
        with pytest.raises(BnferrisConfigError):
            BnferrisConfig.load(str(tmp_path / "missing.json"))

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("{not json")
        with pytest.raises(BnferrisConfigError):
            BnferrisConfig.load(str(path))

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("[1, 2]")
        with pytest.raises(BnferrisConfigError):
            BnferrisConfig.load(str(path))

    def test_save_and_load(self, isolated_home):
        """Test saving to the default location and loading it back."""
        config = BnferrisConfig(max_depth=7)
        config.save()

        config_path = isolated_home / ".bnferris" / "config.json"
        assert config_path.exists()
        with open(config_path) as f:
            assert json.load(f)["max_depth"] == 7
        assert BnferrisConfig.load().max_depth == 7

    def test_ensure_bnferris_dir(self, isolated_home):
        """Test that the bnferris directory is created if it doesn't exist."""
        result = _ensure_bnferris_dir()
        assert os.path.exists(result)
        assert result.endswith(".bnferris")
