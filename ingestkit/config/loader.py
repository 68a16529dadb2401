"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. A YAML file (``config/ingestkit.yaml`` by default), optional
  2. ``.env`` file
  3. ``INGESTKIT_*`` environment variables

Only settings explicitly provided by layers 2 and 3 override the YAML
file; unset fields keep the YAML value (or the built-in default).

The YAML file groups settings by concern::

    chunking:
      strategy: section
      max_tokens_per_chunk: 512
      overlap_tokens: 32
    tokenizer:
      kind: huggingface
      model: bert-base-uncased
    retry:
      max_retries: 3
    source:
      extensions: [".md", ".txt"]
    logging:
      level: DEBUG
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ingestkit.config.settings import Settings
from ingestkit.utils.errors import ConfigurationError

# Settings field -> (section, key) in the YAML document.
_FIELD_PATHS: dict[str, tuple[str, str]] = {
    "chunking_strategy": ("chunking", "strategy"),
    "max_tokens_per_chunk": ("chunking", "max_tokens_per_chunk"),
    "overlap_tokens": ("chunking", "overlap_tokens"),
    "section_heading_level": ("chunking", "section_heading_level"),
    "semantic_similarity_threshold": ("chunking", "semantic_similarity_threshold"),
    "tokenizer": ("tokenizer", "kind"),
    "tokenizer_model": ("tokenizer", "model"),
    "retry_max_retries": ("retry", "max_retries"),
    "retry_initial_delay": ("retry", "initial_delay"),
    "retry_max_delay": ("retry", "max_delay"),
    "retry_backoff_multiplier": ("retry", "backoff_multiplier"),
    "input_extensions": ("source", "extensions"),
    "log_level": ("logging", "level"),
    "app_env": ("app", "env"),
}


def load_config(path: str | Path = "config/ingestkit.yaml") -> dict[str, Any]:
    """Load YAML config and merge environment-provided settings on top.

    Args:
        path: Path to the YAML configuration file. A missing file is
            treated as empty.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the file is not valid YAML, its top level
            is not a mapping, or an environment variable has an invalid value.
    """
    config_path = Path(path)
    yaml_config: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                # safe_load never constructs arbitrary Python objects.
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Top level of {config_path} must be a mapping")
        yaml_config = loaded

    settings = _validated_settings("environment", {})
    env_overrides: dict[str, Any] = {}
    for field in settings.model_fields_set:
        if field not in _FIELD_PATHS:
            continue
        section, key = _FIELD_PATHS[field]
        env_overrides.setdefault(section, {})[key] = getattr(settings, field)

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def settings_from_config(config: dict[str, Any]) -> Settings:
    """Build :class:`Settings` from a (merged) configuration dictionary.

    Raises:
        ConfigurationError: If a value fails validation.
    """
    values: dict[str, Any] = {}
    for field, (section, key) in _FIELD_PATHS.items():
        block = config.get(section)
        if isinstance(block, dict) and key in block:
            values[field] = block[key]
    return _validated_settings("configuration", values)


def load_settings(path: str | Path = "config/ingestkit.yaml") -> Settings:
    """Shortcut for ``settings_from_config(load_config(path))``."""
    return settings_from_config(load_config(path))


def _validated_settings(origin: str, values: dict[str, Any]) -> Settings:
    try:
        return Settings(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid {origin} settings: {problems}") from exc


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
