"""Configuration package for lume.

This package provides TOML-based configuration with layered discovery
and merging from user-level and project-level files.
"""

from lume.config.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    DuplicateConfigError,
)
from lume.config.loader import (
    discover_project_config,
    discover_user_config,
    get_config_home,
    load_all_configs,
    load_toml_file,
)
from lume.config.merge import is_plain_mapping, merge
from lume.config.settings import (
    LumeSettings,
    clear_config_context,
    set_config_context,
)
from lume.config.sources import LumeTomlSettingsSource

__all__ = [
    # Exceptions
    "ConfigError",
    "ConfigFileNotFoundError",
    "DuplicateConfigError",
    # Discovery (loader)
    "discover_project_config",
    "discover_user_config",
    "get_config_home",
    "load_all_configs",
    "load_toml_file",
    # Merging
    "is_plain_mapping",
    "merge",
    # Settings
    "LumeSettings",
    "set_config_context",
    "clear_config_context",
    # Sources
    "LumeTomlSettingsSource",
]
