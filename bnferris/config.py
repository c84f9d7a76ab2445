# bnferris/config.py
import os
import json
from typing import Any, Dict, Optional

from bnferris.grammar.generator import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_EXPANSIONS,
    DEFAULT_MAX_REPETITION,
    DEFAULT_OPTIONAL_PROBABILITY,
)

GENERATOR_KEYS = ("max_depth", "max_repetition", "max_expansions", "optional_probability")


class BnferrisConfigError(Exception):
    """Custom exception for bnferris configuration errors."""
    pass


class BnferrisConfig:
    def __init__(self, **kwargs):
        self._data = {
            "max_depth": kwargs.get("max_depth", DEFAULT_MAX_DEPTH),
            "max_repetition": kwargs.get("max_repetition", DEFAULT_MAX_REPETITION),
            "max_expansions": kwargs.get("max_expansions", DEFAULT_MAX_EXPANSIONS),
            "optional_probability": kwargs.get("optional_probability", DEFAULT_OPTIONAL_PROBABILITY),
            "log_level": kwargs.get("log_level", "WARNING"),
            "log_to_file": kwargs.get("log_to_file", False),
            "use_color": kwargs.get("use_color", True),
        }

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __getattr__(self, name: str) -> Any:
        if name in self._data:
            return self._data[name]
        raise AttributeError(f"'BnferrisConfig' object has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "_data":
            super().__setattr__(name, value)
        else:
            self._data[name] = value

    def generator_options(self) -> Dict[str, Any]:
        """Keyword arguments for GrammarGenerator."""
        return {key: self._data[key] for key in GENERATOR_KEYS}

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "BnferrisConfig":
        """Load config from JSON; a missing default file means all defaults."""
        if config_path is None:
            config_path = default_config_path()
            if not os.path.exists(config_path):
                return cls()

        try:
            with open(os.path.expanduser(config_path), "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise BnferrisConfigError(f"Failed to load config from {config_path}: {e}")
        if not isinstance(data, dict):
            raise BnferrisConfigError(f"Config in {config_path} must be a JSON object")
        return cls(**data)

    def save(self, config_path: Optional[str] = None) -> None:
        if config_path is None:
            config_path = os.path.join(_ensure_bnferris_dir(), "config.json")
        try:
            with open(os.path.expanduser(config_path), "w") as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            raise BnferrisConfigError(f"Failed to save bnferris config: {e}")


def default_config_path() -> str:
    return os.path.join(os.path.expanduser("~"), ".bnferris", "config.json")


def _ensure_bnferris_dir() -> str:
    """Ensure that ~/.bnferris/ directory exists. Return its path."""
    home = os.path.expanduser("~")
    bnferris_dir = os.path.join(home, ".bnferris")
    os.makedirs(bnferris_dir, exist_ok=True)
    return bnferris_dir
