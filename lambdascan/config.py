"""
Configuration for the library surface analyser.

Defaults are merged with an optional YAML or JSON file; command-line options
override both.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

CONFIG_FILE_NAMES = [
    ".lambdascan.yml",
    ".lambdascan.yaml",
    "lambdascan.yml",
    "lambdascan.yaml",
]

REPORT_FORMATS = ("text", "json")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised for invalid configuration values."""


class Config:
    """Configuration manager with dot-separated key access."""

    DEFAULT_CONFIG = {
        "candidates": {
            "namespace_prefixes": ["java", "org"]
        },
        "scan": {
            "source_type": "java.util.stream.Stream",
            "excluded_namespace": "java.util.stream",
            "public_only": False,
            "workers": None  # None = one per CPU
        },
        "novelty": {
            "marker": "NEW",
            "detect_new_types": False
        },
        "report": {
            "output": "-",  # '-' writes to stdout
            "format": "text"
        },
        "logging": {
            "level": "WARNING",
            "file": None
        }
    }

    def __init__(self, config_dict: Optional[Dict] = None):
        """Initialize with optional config dictionary."""
        self.config = self._merge_configs(copy.deepcopy(self.DEFAULT_CONFIG), config_dict or {})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from a file."""
        path = Path(path)
        if not path.exists():
            return cls()

        if path.suffix not in [".yaml", ".yml", ".json"]:
            raise ConfigError(f"Unsupported config format: {path.suffix}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                if path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise ConfigError(f"Could not parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration in {path} must be a mapping")
        return cls(data)

    @classmethod
    def find_and_load(cls, start_path: Path) -> "Config":
        """Find and load configuration from standard locations."""
        current = Path(start_path).resolve()

        while True:
            for name in CONFIG_FILE_NAMES:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path)
            if current == current.parent:
                break
            current = current.parent

        return cls()

    def get(self, key: str, default=None):
        """Get configuration value by dot-separated key."""
        value: Any = self.config

        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value):
        """Set configuration value by dot-separated key."""
        keys = key.split(".")
        config = self.config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return copy.deepcopy(self.config)

    def validate(self) -> None:
        """Check value ranges; raises ConfigError on the first problem."""
        fmt = self.get("report.format")
        if fmt not in REPORT_FORMATS:
            raise ConfigError(
                f"report.format must be one of {', '.join(REPORT_FORMATS)}, got {fmt!r}"
            )

        workers = self.get("scan.workers")
        if workers is not None and (not isinstance(workers, int) or workers < 1):
            raise ConfigError(f"scan.workers must be a positive integer, got {workers!r}")

        prefixes = self.get("candidates.namespace_prefixes")
        if (
            not isinstance(prefixes, (list, tuple))
            or not prefixes
            or not all(isinstance(p, str) and p for p in prefixes)
        ):
            raise ConfigError("candidates.namespace_prefixes must be a non-empty list of strings")

        level = self.get("logging.level")
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}"
            )

        if not self.get("scan.source_type"):
            raise ConfigError("scan.source_type must not be empty")

    def _merge_configs(self, base: Dict, override: Dict) -> Dict:
        """Recursively merge configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result
