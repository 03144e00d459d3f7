"""YAML configuration loader with inheritance support.

Supports:
- Loading YAML config files
- Config inheritance via 'extends' key
- Deep merging of nested config
"""

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from . import (
    ClassificationConfig,
    ConnectivityConfig,
    ExtractionConfig,
    LLMConfig,
    LoggingConfig,
    QueueConfig,
    QuillConfig,
    SectionsConfig,
    StorageConfig,
)

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_with_inheritance(path: Path) -> dict[str, Any]:
    """Load YAML file with inheritance support.

    If the file contains an 'extends' key, the base config is loaded first
    and merged with the current config.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    if "extends" in config:
        base_name = config.pop("extends")
        base_config = load_yaml_with_inheritance(path.parent / base_name)
        config = deep_merge(base_config, config)

    return config


def _section(cls: type, data: dict[str, Any] | None) -> Any:
    """Build a config section, ignoring keys the dataclass does not define."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def dict_to_config(data: dict[str, Any]) -> QuillConfig:
    """Convert raw dict to typed QuillConfig dataclass."""
    quill_data = data.get("quill", {}) or {}

    return QuillConfig(
        llm=_section(LLMConfig, quill_data.get("llm")),
        classification=_section(ClassificationConfig, quill_data.get("classification")),
        sections=_section(SectionsConfig, quill_data.get("sections")),
        extraction=_section(ExtractionConfig, quill_data.get("extraction")),
        queue=_section(QueueConfig, quill_data.get("queue")),
        storage=_section(StorageConfig, quill_data.get("storage")),
        connectivity=_section(ConnectivityConfig, quill_data.get("connectivity")),
        logging=_section(LoggingConfig, quill_data.get("logging")),
    )


class YAMLConfigLoader:
    """YAML configuration loader implementation."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize loader with optional config directory.

        Args:
            config_dir: Directory containing config files.
                        Defaults to 'config' relative to project root.
        """
        self._config_dir = config_dir if config_dir is not None else DEFAULT_CONFIG_DIR

    def load(self, path: Path) -> QuillConfig:
        """Load configuration from file path."""
        return dict_to_config(load_yaml_with_inheritance(path))

    def load_profile(self, profile: str) -> QuillConfig:
        """Load configuration by profile name.

        Args:
            profile: Profile name (e.g., 'dev', 'prod')

        Returns:
            Parsed QuillConfig for the profile
        """
        return self.load(self._config_dir / f"{profile}.yaml")

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir


def load_config(path: str | Path | None = None, profile: str | None = None) -> QuillConfig:
    """Load Quill configuration.

    Args:
        path: Direct path to config file (takes precedence)
        profile: Profile name ('dev', 'prod') if path not given

    Returns:
        Parsed QuillConfig. Built-in defaults are used when no path or
        profile is given and the default profile file is absent.

    Examples:
        >>> config = load_config(profile="dev")
        >>> config = load_config(path="/path/to/config.yaml")
    """
    loader = YAMLConfigLoader()

    if path is not None:
        return loader.load(Path(path))
    if profile is not None:
        return loader.load_profile(profile)

    default_path = loader.get_config_dir() / "default.yaml"
    if default_path.exists():
        return loader.load(default_path)
    return QuillConfig()


__all__ = [
    "YAMLConfigLoader",
    "deep_merge",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
]
