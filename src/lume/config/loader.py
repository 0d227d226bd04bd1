"""Configuration file discovery and loading.

Discovers and loads TOML configuration files from user-level and
project-level locations, layering them with `merge`.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from lume.config.exceptions import (
    ConfigFileNotFoundError,
    DuplicateConfigError,
)
from lume.config.merge import merge

logger = logging.getLogger(__name__)


def get_config_home() -> Path:
    """Get the lume config home directory.

    Priority:
    1. $LUME_CONFIG_HOME if set
    2. $XDG_CONFIG_HOME/lume if XDG_CONFIG_HOME is set
    3. ~/.config/lume (default)

    Returns:
        Path to the lume config home directory.
    """
    if lume_config_home := os.environ.get("LUME_CONFIG_HOME"):
        return Path(lume_config_home)

    if xdg_config_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config_home) / "lume"

    return Path.home() / ".config" / "lume"


def discover_user_config() -> Path | None:
    """Return the user-level config.toml if it exists."""
    config_file = get_config_home() / "config.toml"
    if config_file.is_file():
        return config_file
    return None


def _pick_one(flat: Path, nested: Path) -> Path | None:
    """Return whichever of two equivalent config files exists.

    Raises:
        DuplicateConfigError: If both exist.
    """
    if flat.is_file() and nested.is_file():
        raise DuplicateConfigError([str(flat), str(nested)])
    if flat.is_file():
        return flat
    if nested.is_file():
        return nested
    return None


def discover_project_config(project_dir: Path) -> tuple[Path | None, Path | None]:
    """Discover project-level configuration files.

    Looks for:
    - Base config: lume.toml OR .lume/config.toml (mutually exclusive)
    - Local config: lume.local.toml OR .lume/config.local.toml (mutually exclusive)

    Args:
        project_dir: The project directory to search in.

    Returns:
        Tuple of (base_config_path, local_config_path). Either may be None.

    Raises:
        DuplicateConfigError: If both formats exist at the same level.
    """
    dot_lume = project_dir / ".lume"

    base_config = _pick_one(project_dir / "lume.toml", dot_lume / "config.toml")
    local_config = _pick_one(
        project_dir / "lume.local.toml", dot_lume / "config.local.toml"
    )

    return base_config, local_config


def load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dict.

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file contains invalid TOML.
    """
    if not path.is_file():
        raise ConfigFileNotFoundError(str(path))

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_all_configs(
    project_dir: Path,
    explicit_config: Path | None = None,
) -> tuple[dict[str, Any], list[Path]]:
    """Load and merge all configuration files.

    When explicit_config is provided, ONLY that file is loaded (no merging).
    Otherwise, files are discovered and merged in priority order:
    1. User config (lowest)
    2. Project base config
    3. Project local config (highest)

    Args:
        project_dir: The project directory.
        explicit_config: Explicit config file path (--config option).

    Returns:
        Tuple of (merged_config_dict, list_of_loaded_files).

    Raises:
        ConfigFileNotFoundError: If explicit_config is provided but doesn't exist.
        DuplicateConfigError: If conflicting config files exist.
    """
    if explicit_config is not None:
        logger.debug("Loading explicit config %s", explicit_config)
        return load_toml_file(explicit_config), [explicit_config]

    base_config, local_config = discover_project_config(project_dir)
    candidates = [discover_user_config(), base_config, local_config]

    loaded_files: list[Path] = []
    merged: dict[str, Any] = {}

    for path in candidates:
        if path is None:
            continue
        logger.debug("Loading config %s", path)
        merged = merge(merged, load_toml_file(path))
        loaded_files.append(path)

    return merged, loaded_files
