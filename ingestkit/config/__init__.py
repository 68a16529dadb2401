"""Configuration module -- exports Settings and the YAML loaders."""

from ingestkit.config.loader import load_config, load_settings, settings_from_config
from ingestkit.config.settings import Settings

__all__ = ["Settings", "load_config", "load_settings", "settings_from_config"]
